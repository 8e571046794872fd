from marshmallow import EXCLUDE, Schema, fields, validate, validates, ValidationError

from app.services.message_rules import is_generic_item


class LogEntrySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    item = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    meal_type = fields.Str(data_key="mealType", allow_none=True, validate=validate.Length(max=50))
    quantity = fields.Float(allow_none=True, validate=validate.Range(min=0))
    unit = fields.Str(allow_none=True, validate=validate.Length(max=50))
    calories = fields.Float(allow_none=True, validate=validate.Range(min=0))
    protein = fields.Float(allow_none=True, validate=validate.Range(min=0))
    carbs = fields.Float(allow_none=True, validate=validate.Range(min=0))
    fat = fields.Float(allow_none=True, validate=validate.Range(min=0))
    fiber = fields.Float(allow_none=True, validate=validate.Range(min=0))
    sugar = fields.Float(allow_none=True, validate=validate.Range(min=0))
    sodium = fields.Float(allow_none=True, validate=validate.Range(min=0))
    notes = fields.Str(allow_none=True)

    @validates("item")
    def validate_item(self, value, **kwargs):
        if not value.strip() or is_generic_item(value):
            raise ValidationError("Item must name a specific food")


class CreateLogsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    user_id = fields.Int(data_key="userId", allow_none=True, validate=validate.Range(min=1))
    day = fields.Date(allow_none=True)
    logs = fields.List(fields.Nested(LogEntrySchema), required=True, validate=validate.Length(min=1))


class DeleteLogSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Int(required=True, strict=False, validate=validate.Range(min=1))
