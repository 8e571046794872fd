from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate

from app.utils.enums import ChatAction


class LenientFloat(fields.Float):
    """Model numbers sometimes arrive as "about 140"; treat those as unknown."""

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return super()._deserialize(value, attr, data, **kwargs)
        except ValidationError:
            return None


class HistoryMessageSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    role = fields.Str(required=True, validate=validate.OneOf(["user", "assistant"]))
    content = fields.Str(required=True)


class ChatRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    message = fields.Str(required=True, validate=validate.Length(min=1))
    user_id = fields.Int(data_key="userId", allow_none=True, validate=validate.Range(min=1))
    day = fields.Str(allow_none=True)
    conversation_history = fields.List(
        fields.Nested(HistoryMessageSchema), data_key="conversationHistory", load_default=list
    )
    state = fields.Dict(allow_none=True, load_default=None)

    @pre_load
    def strip_message(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            data = dict(data)
            data["message"] = data["message"].strip()
        return data


# ---------------------------------------------------------------------------
# Model output
# ---------------------------------------------------------------------------

class ModelLogSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    item = fields.Str(allow_none=True)
    meal_type = fields.Str(data_key="mealType", allow_none=True)
    quantity = LenientFloat(allow_none=True)
    unit = fields.Str(allow_none=True)
    calories = LenientFloat(allow_none=True)
    protein = LenientFloat(allow_none=True)
    carbs = LenientFloat(allow_none=True)
    fat = LenientFloat(allow_none=True)
    fiber = LenientFloat(allow_none=True)
    sugar = LenientFloat(allow_none=True)
    sodium = LenientFloat(allow_none=True)
    notes = fields.Str(allow_none=True)


class ModelGoalsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    target_calories = LenientFloat(data_key="targetCalories", allow_none=True)
    target_protein = LenientFloat(data_key="targetProtein", allow_none=True)
    target_carbs = LenientFloat(data_key="targetCarbs", allow_none=True)
    target_fat = LenientFloat(data_key="targetFat", allow_none=True)


class ModelRemovalSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Int(allow_none=True)
    item = fields.Str(allow_none=True)
    meal_type = fields.Str(data_key="mealType", allow_none=True)


class ModelOutputSchema(Schema):
    """Structured reply expected from the language model."""

    class Meta:
        unknown = EXCLUDE

    action = fields.Str(allow_none=True, validate=validate.OneOf([a.value for a in ChatAction]))
    day = fields.Str(allow_none=True)
    logs = fields.List(fields.Nested(ModelLogSchema), allow_none=True, load_default=list)
    goals = fields.Nested(ModelGoalsSchema, allow_none=True, load_default=None)
    items_to_remove = fields.List(
        fields.Nested(ModelRemovalSchema), data_key="itemsToRemove", allow_none=True, load_default=list
    )
    needs_confirmation = fields.Bool(data_key="needsConfirmation", allow_none=True, load_default=None)
    reply = fields.Str(allow_none=True)
    clarify = fields.List(fields.Str(), allow_none=True, load_default=list)

    @pre_load
    def normalize_action(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("action"), str):
            data = dict(data)
            data["action"] = data["action"].strip().lower() or None
        return data
