"""Contratos de proveedores (identidad y textura).

Por qué Protocol:
- Los servicios del Core solo conocen `name`, `tier` y la firma async.
- Los tests sustituyen proveedores reales por dobles sin heredar de nada.
"""
