from .home_routes import home_bp
from .chat_routes import chat_bp
from .goal_routes import goal_bp
from .log_routes import log_bp
from .summary_routes import summary_bp
from .coach_routes import coach_bp

def register_routes(app):
    app.register_blueprint(home_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(goal_bp)
    app.register_blueprint(log_bp)
    app.register_blueprint(summary_bp)
    app.register_blueprint(coach_bp)
