"""
Infrastructure Layer

Adapters concretos de los puertos del dominio:
  - db/            pool psycopg instrumentado + errores tipados
  - repositories/  Postgres (producción) e in-memory (tests / dev local)
  - services/      utilidades de resiliencia (retry con tenacity)

Este paquete no re-exporta símbolos: importar desde el subpaquete concreto.
"""
