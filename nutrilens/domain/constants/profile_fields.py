"""Constants for dietary profile field names"""


class ProfileFields:
    """Field name constants for the users collection"""
    USERNAME = "username"
    DIET_PREFERENCE = "diet_preference"
    DIET_RESTRICTIONS = "diet_restrictions"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"

    # MongoDB specific
    MONGO_ID = "_id"  # MongoDB's internal _id field
