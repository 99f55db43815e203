"""
===============================================================================
TARJETA CRC — schemas/__init__.py
===============================================================================

Módulo:
    Paquete de Schemas HTTP (DTOs Pydantic)

Responsabilidades:
    - Agrupar contratos HTTP por contexto (offers/admin).
    - Mantener separados DTOs (schemas) de controladores (routers).

Reglas:
    - Schemas NO deben importar infraestructura.
    - Schemas NO deben ejecutar casos de uso.
    - Solo tipos y validación de input/output.
===============================================================================
"""

__all__ = []
