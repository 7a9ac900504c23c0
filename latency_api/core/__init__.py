"""Core del servicio: dominio, reloj y validación."""
