"""Сервис бронирования студентов-ассистентов преподавателями."""
