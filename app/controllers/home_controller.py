from datetime import datetime, timezone

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db


def home_index():
    return jsonify({
        "message": "Nutrition logging API is running",
    })


def health_check():
    db_status = "healthy"
    try:
        db.session.execute(db.text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        db_status = f"unhealthy: {str(e)}"

    return jsonify({
        "status": "online",
        "database": db_status,
        "server_time": datetime.now(timezone.utc).isoformat(),
    })
