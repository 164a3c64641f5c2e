"""Core module - Motor de recurrencias y ventanas de vencimiento.

Estructura:
- domain/      → Modelos y claves de correlación
"""
