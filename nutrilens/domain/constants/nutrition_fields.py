class NutritionFields:
    """MongoDB field names for the nutrition_facts collection"""

    MONGO_ID = "_id"

    USER_ID = "user_id"
    IMG_URL = "imgURL"
    DESCRIPTION = "description"
    TIMESTAMP = "timestamp"
