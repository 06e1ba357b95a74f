# Constants for the For You feed pipeline.
MAX_QUERIES = 6  # Search queries executed per regeneration
RESULTS_PER_QUERY = 4  # Listings kept from each query
FINAL_K = 20  # Feed length after dedupe
TOP_FEATURES = 3  # Colours/categories/brands kept by the wardrobe analysis

# Marketplace query sanitization
MAX_QUERY_LENGTH = 100
MIN_WORD_CUT = 20  # Only cut back to a word boundary past this offset

# Platforms
PLATFORM_CAROUSELL = "Carousell"
PLATFORM_WARDROBE = "My Wardrobe"
SCOPE_ALL = "All"
SCOPE_FOR_YOU = "For You"

# Colour wheel used for accessory suggestions (fallback queries)
COLOR_COMPLEMENTS = {
    "Black": "White",
    "White": "Black",
    "Blue": "Orange",
    "Red": "Green",
    "Green": "Red",
    "Yellow": "Purple",
    "Purple": "Yellow",
    "Pink": "Green",
    "Brown": "Blue",
    "Gray": "Yellow",
    "Navy": "Gold",
    "Beige": "Navy",
}

# Closet reminder trigger for the search page
CLOSET_HINT_KEYWORD = "blazer"
