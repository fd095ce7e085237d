"""Servicio de autenticación: registro de usuarios con contraseñas hasheadas y emisión de tokens bearer."""
