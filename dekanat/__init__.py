"""
Инициализация Flask приложения консоли деканата
"""
import os
import logging
from flask import Flask
from flask_login import LoginManager
from flask_wtf import CSRFProtect

# Импортируем db из models, чтобы он был доступен для инициализации
from dekanat.models import db
from dekanat_core.audit_logger import audit_logger
from dekanat_core.backend_client import DEFAULT_API_URL

# Инициализация расширений
csrf = CSRFProtect()
login_manager = LoginManager()


def _env_flag(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def _configure_logging(base_dir):
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    log_dir = os.path.join(base_dir, 'logs')
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'app.log')

    logging.basicConfig(
        level=logging.INFO,
        format=log_format,
        handlers=[
            logging.StreamHandler(),  # Вывод в консоль
            logging.FileHandler(log_file, encoding='utf-8')  # Вывод в файл app.log
        ]
    )


def create_app(config=None):
    """
    Фабрика приложений Flask
    Создает и настраивает экземпляр Flask приложения.
    config - словарь, перекрывающий настройки из окружения (используется в тестах)
    """
    config = dict(config or {})

    # Базовая директория проекта
    base_dir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    template_dir = os.path.join(base_dir, 'templates')
    static_dir = os.path.join(base_dir, 'static')

    app = Flask(__name__,
                template_folder=template_dir,
                static_folder=static_dir)

    # Настройка базы данных (только журнал действий, данные живут на бэкенде)
    database_url = os.environ.get('DATABASE_URL')
    if database_url:
        if database_url.startswith('postgres://'):
            database_url = database_url.replace('postgres://', 'postgresql://', 1)
        app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    elif 'SQLALCHEMY_DATABASE_URI' not in config:
        data_dir = os.path.join(base_dir, 'data')
        os.makedirs(data_dir, exist_ok=True)
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{os.path.join(data_dir, 'dekanat_console.db')}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'local-dev-key-12345')
    app.config['WTF_CSRF_ENABLED'] = True
    app.config['WTF_CSRF_TIME_LIMIT'] = None

    # REST-бэкенд деканата
    app.config['DEKANAT_API_URL'] = os.environ.get('DEKANAT_API_URL', DEFAULT_API_URL)
    try:
        app.config['DEKANAT_API_TIMEOUT'] = float(os.environ.get('DEKANAT_API_TIMEOUT', '15'))
    except ValueError:
        app.config['DEKANAT_API_TIMEOUT'] = 15.0
    # Списки сущностей открыты всем; false - только для ADMIN
    app.config['DEKANAT_PUBLIC_LISTS'] = _env_flag('DEKANAT_PUBLIC_LISTS', True)

    # Определение окружения (production, local)
    app.config['ENVIRONMENT'] = os.environ.get('ENVIRONMENT', 'local')

    app.config.update(config)

    if not app.config.get('TESTING'):
        _configure_logging(base_dir)
    logger = logging.getLogger(__name__)

    logger.info("=== Application Initialization ===")
    logger.info(f"Environment: {app.config['ENVIRONMENT']}")
    logger.info(f"Backend API: {app.config['DEKANAT_API_URL']}")
    logger.info(f"Public lists: {'YES' if app.config['DEKANAT_PUBLIC_LISTS'] else 'NO'}")
    if not database_url and 'SQLALCHEMY_DATABASE_URI' not in config:
        logger.warning("DATABASE_URL not set, audit log uses SQLite")

    # Инициализация расширений
    csrf.init_app(app)
    db.init_app(app)
    audit_logger.init_app(app)

    # Настройка Flask-Login
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Для доступа к системе необходимо войти.'
    login_manager.login_message_category = 'warning'

    from dekanat.auth.session_store import load_user
    login_manager.user_loader(load_user)

    from dekanat.utils.backend import init_backend
    init_backend(app)

    with app.app_context():
        db.create_all()

    # Регистрация блюпринтов
    from dekanat.auth import auth_bp
    from dekanat.main import main_bp
    from dekanat.institutes import institutes_bp
    from dekanat.kafedras import kafedras_bp
    from dekanat.students import students_bp
    from dekanat.employees import employees_bp
    from dekanat.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(institutes_bp)
    app.register_blueprint(kafedras_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(admin_bp)

    # Хуки, контекст шаблонов и обработчики ошибок
    from dekanat.utils.hooks import register_hooks
    register_hooks(app)

    logger.info("=== Initialization Complete ===")
    return app
