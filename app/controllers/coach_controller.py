from flask import current_app

from app.services.coaching_service import encouragement, progress_review
from app.services.llm_gateway import get_llm_gateway
from app.utils.dates import reference_today, reference_zone
from app.utils.http import ok, arg_int


def progress_review_handler():
    user_id = arg_int("userId", current_app.config["DEFAULT_USER_ID"], min_value=1)
    today = reference_today(reference_zone())
    return ok({"message": progress_review(get_llm_gateway(), user_id, today)})


def encouragement_handler():
    user_id = arg_int("userId", current_app.config["DEFAULT_USER_ID"], min_value=1)
    today = reference_today(reference_zone())
    return ok({"message": encouragement(get_llm_gateway(), user_id, today)})
