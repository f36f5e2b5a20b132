"""
Точка входа: gunicorn wsgi:app или python wsgi.py для локального запуска
"""
import logging
import os

from dekanat import create_app

logger = logging.getLogger(__name__)

# Создаем приложение используя фабрику
app = create_app()

if __name__ == '__main__':
    logger.info('Запуск консоли деканата')
    app.run(debug=app.config['ENVIRONMENT'] == 'local', host='127.0.0.1', port=int(os.environ.get('PORT', 5000)))
