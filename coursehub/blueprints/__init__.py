from .questions import questions_bp
from .quizzes import quizzes_bp
from .lessons import lessons_bp
from .certificates import certificates_bp
from .chat import chat_bp
from .payments import payments_bp
from .system import system_bp

ALL_BLUEPRINTS = (questions_bp, quizzes_bp, lessons_bp, certificates_bp, chat_bp, payments_bp, system_bp)

__all__ = [
    'questions_bp',
    'quizzes_bp',
    'lessons_bp',
    'certificates_bp',
    'chat_bp',
    'payments_bp',
    'system_bp',
    'ALL_BLUEPRINTS',
]
