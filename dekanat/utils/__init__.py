"""
Общие помощники маршрутов: бэкенд, формы, CRUD-страницы, хуки
"""
