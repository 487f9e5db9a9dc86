"""Dominio: identificadores, referencias de textura, specs de composición y resultados.

Por qué separado:
- Pydantic v2 valida specs y políticas de caché en el borde.
- Nada aquí hace I/O ni conoce httpx o Pillow.
"""
