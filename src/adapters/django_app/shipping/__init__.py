"""
Adapter Django do domínio de Frete.

Persistência (models, repositórios), API JSON, admin e
integração com a API Melhor Envio.
"""
