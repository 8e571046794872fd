"""
Food Service Constants

Keyword lists, nutrition constants and calculator tables shared by the chat
engine and the goal calculator. The keyword lists are defaults for the
message classifier, not an exhaustive vocabulary.
"""

# Nutrition calculation constants
CALORIES_PER_GRAM_PROTEIN = 4.0
CALORIES_PER_GRAM_CARBS = 4.0
CALORIES_PER_GRAM_FAT = 9.0

# Named macro splits: percentage of calories from protein / carbs / fat
MACRO_SPLITS = {
    "balanced": {"name": "Balanced", "protein": 25, "carbs": 50, "fat": 25,
                 "description": "Standard balanced approach"},
    "high-protein": {"name": "High Protein", "protein": 35, "carbs": 40, "fat": 25,
                     "description": "Higher protein for muscle building/recovery"},
    "low-carb": {"name": "Low Carb", "protein": 30, "carbs": 25, "fat": 45,
                 "description": "Reduced carbs, higher fat"},
    "athlete": {"name": "Athlete", "protein": 30, "carbs": 55, "fat": 15,
                "description": "Higher carbs for performance"},
    "keto": {"name": "Keto", "protein": 25, "carbs": 10, "fat": 65,
             "description": "Very low carb, high fat"},
}
DEFAULT_MACRO_SPLIT = "balanced"

ACTIVITY_FACTORS = {
    "sedentary": 1.2,
    "lightly active": 1.375,
    "moderately active": 1.55,
    "very active": 1.725,
    "extra active": 1.9,
}

GOAL_TYPES = ["lose", "maintain", "gain"]

# Daily calorie adjustment per goal pace
PACE_ADJUSTMENTS = {
    "lose-slow": -250,
    "lose-moderate": -500,
    "lose-aggressive": -750,
    "gain-slow": 375,
}

# Foods whose calories swing too much to estimate without an amount
AMBIGUOUS_FOODS = [
    "sauce", "dressing", "meat", "vegetables", "veggies", "salad", "soup",
    "sandwich", "pizza", "burger", "smoothie", "shake", "cereal", "yogurt",
    "cheese", "bread", "rice", "pasta", "noodles", "fish", "dessert", "oil",
    "butter", "peanut butter", "nuts", "granola", "chips", "snack",
]

# Names that must never reach the database
GENERIC_ITEM_NAMES = {
    "food", "food item", "item", "items", "unknown", "unknown item",
    "unknown food", "something", "stuff", "meal", "snack item",
}

AFFIRMATIVE_PHRASES = {
    "yes", "y", "yep", "yeah", "yup", "ya", "sure", "ok", "okay", "k",
    "confirm", "confirmed", "correct", "right", "that's right", "thats right",
    "add it", "log it", "add them", "log them", "do it", "go ahead",
    "sounds good", "looks good", "looks right", "perfect", "yes please",
}

NEGATIVE_PHRASES = {
    "no", "n", "nope", "nah", "cancel", "don't", "dont", "do not",
    "never mind", "nevermind", "wrong", "incorrect", "forget it",
    "scratch that", "don't log it", "dont log it", "don't add it",
    "no thanks", "no thank you", "no more", "remove it", "delete it",
}

# Confirm a pending removal, where they would cancel a pending addition
REMOVAL_CONFIRM_PHRASES = {
    "remove it", "delete it", "remove them", "delete them", "remove", "delete",
    "remove that", "delete that", "remove those", "delete those",
}

DONE_LOGGING_PHRASES = [
    "done for today", "done for the day", "done logging", "done eating",
    "finished logging", "finished eating", "finished for today",
    "complete for today", "that's all for today", "thats all for today",
    "that's everything", "thats everything", "all done", "i'm done", "im done",
    "no more food today", "that's it for today", "thats it for today",
]

# Units accepted in quantity expressions, mapped to a canonical spelling
UNIT_ALIASES = {
    "tbsp": "tbsp", "tbs": "tbsp", "tbspn": "tbsp", "tablespoon": "tbsp", "tablespoons": "tbsp",
    "tsp": "tsp", "teaspoon": "tsp", "teaspoons": "tsp",
    "cup": "cup", "cups": "cup",
    "oz": "oz", "ounce": "oz", "ounces": "oz",
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "g": "g", "gram": "g", "grams": "g",
    "kg": "kg",
    "ml": "ml",
    "handful": "handful", "handfuls": "handful",
    "slice": "slice", "slices": "slice",
    "piece": "piece", "pieces": "piece",
    "serving": "serving", "servings": "serving",
    "scoop": "scoop", "scoops": "scoop",
    "bowl": "bowl", "bowls": "bowl",
    "can": "can", "cans": "can",
    "bottle": "bottle", "bottles": "bottle",
    "glass": "glass", "glasses": "glass",
    "pint": "pint", "pints": "pint",
}

NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "half": 0.5, "half a": 0.5, "a couple": 2, "couple": 2, "a few": 3,
}

CLARIFICATION_MARKERS = ["how much", "roughly", "about how", "rough amount", "how many", "quantity"]

GENERIC_HELP_MESSAGE = (
    "I'm having trouble understanding that right now. You can:\n"
    "• Log food: \"I had 2 eggs for breakfast\"\n"
    "• Ask for suggestions: \"What should I eat?\"\n"
    "• Remove items: \"Remove the eggs from today\"\n"
    "• Get help: \"What can you do?\""
)
GATEWAY_ERROR_MESSAGE = (
    "I'm having trouble processing your request right now. Please try again in a moment."
)
DATABASE_ERROR_MESSAGE = (
    "I'm having trouble connecting to your data right now. This might be a temporary issue. "
    "Please try again in a moment."
)
GENERIC_ITEM_MESSAGE = (
    "I'm having trouble identifying what food item you're referring to. Could you please be more "
    "specific? For example: \"I had a 20 oz IPA\" or \"I ate 2 eggs\""
)
DEFAULT_CHAT_REPLY = "I understand. How else can I help you with your nutrition tracking?"
LAST_RESORT_REPLY = (
    "I'm here to help with your nutrition tracking. You can ask me to log food, remove items, "
    "or get advice about your goals."
)
