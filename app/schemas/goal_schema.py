from marshmallow import EXCLUDE, Schema, fields, validate, validates_schema, ValidationError

from app.services.food_constants import ACTIVITY_FACTORS, GOAL_TYPES, MACRO_SPLITS, PACE_ADJUSTMENTS


class GoalTargetsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    target_calories = fields.Int(data_key="targetCalories", allow_none=True, validate=validate.Range(min=0))
    target_protein = fields.Int(data_key="targetProtein", allow_none=True, validate=validate.Range(min=0))
    target_carbs = fields.Int(data_key="targetCarbs", allow_none=True, validate=validate.Range(min=0))
    target_fat = fields.Int(data_key="targetFat", allow_none=True, validate=validate.Range(min=0))
    macro_split = fields.Str(data_key="macroSplit", allow_none=True, validate=validate.OneOf(list(MACRO_SPLITS)))


class BioSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    age = fields.Int(allow_none=True, validate=validate.Range(min=1, max=120))
    biological_sex = fields.Str(data_key="biologicalSex", allow_none=True,
                                validate=validate.OneOf(["male", "female"]))
    # inches / pounds
    height = fields.Int(allow_none=True, validate=validate.Range(min=20, max=108))
    weight = fields.Int(allow_none=True, validate=validate.Range(min=20, max=1500))
    activity_level = fields.Str(data_key="activityLevel", allow_none=True,
                                validate=validate.OneOf(list(ACTIVITY_FACTORS)))


class GoalSettingsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    goal_type = fields.Str(data_key="goalType", allow_none=True, validate=validate.OneOf(GOAL_TYPES))
    pace = fields.Str(allow_none=True, validate=validate.OneOf(list(PACE_ADJUSTMENTS)))


class GoalsRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    goal = fields.Nested(GoalTargetsSchema, allow_none=True)
    bio = fields.Nested(BioSchema, allow_none=True)
    goal_settings = fields.Nested(GoalSettingsSchema, data_key="goalSettings", allow_none=True)


class CalculateGoalsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    bio = fields.Nested(BioSchema, required=True)
    macro_split = fields.Str(data_key="macroSplit", allow_none=True, validate=validate.OneOf(list(MACRO_SPLITS)))
    goal_settings = fields.Nested(GoalSettingsSchema, data_key="goalSettings", allow_none=True)

    @validates_schema
    def validate_bio_complete(self, data, **kwargs):
        bio = data.get("bio") or {}
        missing = [name for name in BioSchema().fields if bio.get(name) is None]
        if missing:
            raise ValidationError({"bio": {name: ["Field is required to calculate goals"] for name in missing}})
