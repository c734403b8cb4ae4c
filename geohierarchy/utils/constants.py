# hierarchy search keyword constraints; these characters are rejected, never escaped
KEYWORD_MAX_LENGTH = 100
KEYWORD_FORBIDDEN_CHARACTERS = ("'", ";", "/", "*", "-")

# largest id accepted by the integer primary keys of the hierarchy tables
LOCATION_ID_MAX = 2147483647

HIERARCHY_SEARCH_SUCCESS_MESSAGE = "Hierarchy search completed successfully"
