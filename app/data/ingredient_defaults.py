"""
Reference impact factors for ingredients.

Each entry gives the weight of one piece of the ingredient, its average US
grocery price per kg, and its carbon intensity (kg CO2e per kg of food).

Data Sources:
- Weight: USDA FoodData Central (typical serving/unit weights)
- Cost: Average US grocery prices (2024-2026 estimates)
- Carbon: DEFRA emissions factors, EPA estimates, academic research

Carbon Intensity Reference (kg CO2e per kg of food):
- Beef: 27.0
- Lamb: 39.2
- Pork: 12.1
- Chicken: 6.9
- Fish: 5.4
- Eggs: 4.8
- Dairy (cheese): 13.5
- Dairy (milk): 3.2
- Rice: 4.0
- Vegetables: 0.5-2.0
- Fruits: 0.4-1.1
"""

from typing import Any, Dict, List, Optional

IngredientFactors = Dict[str, Any]


def _factors(
    unit_weight_kg: float,
    cost_per_kg: float,
    co2_per_kg: float,
    category: str,
    aliases: List[str],
) -> IngredientFactors:
    return {
        "unit_weight_kg": unit_weight_kg,
        "cost_per_kg": cost_per_kg,
        "co2_per_kg": co2_per_kg,
        "category": category,
        "aliases": aliases,
    }


# Estimate used for names missing from the table. Deliberately small so an
# unknown item never dominates a user's totals.
DEFAULT_ESTIMATE: Dict[str, float] = {
    "weight_kg": 0.1,
    "cost_usd": 0.5,
    "co2_kg": 0.2,
}

# Tier thresholds per badge type, ascending bronze < silver < gold.
BADGE_THRESHOLDS: Dict[str, Dict[str, float]] = {
    "waste_saver": {"bronze": 5.0, "silver": 25.0, "gold": 100.0},        # kg prevented
    "money_saver": {"bronze": 50.0, "silver": 250.0, "gold": 1000.0},     # USD saved
    "carbon_hero": {"bronze": 10.0, "silver": 50.0, "gold": 200.0},       # kg CO2 avoided
    "streak_master": {"bronze": 7, "silver": 30, "gold": 100},            # days
    "recipe_chef": {"bronze": 5, "silver": 25, "gold": 100},              # recipe events
    "community_hero": {"bronze": 3, "silver": 15, "gold": 50},            # shared items
}

# Units that are a mass: kg per unit.
WEIGHT_UNITS: Dict[str, float] = {
    "kg": 1.0,
    "kilogram": 1.0,
    "kilograms": 1.0,
    "g": 0.001,
    "gram": 0.001,
    "grams": 0.001,
    "lb": 0.453592,
    "lbs": 0.453592,
    "pound": 0.453592,
    "pounds": 0.453592,
    "oz": 0.0283495,
    "ounce": 0.0283495,
    "ounces": 0.0283495,
}

# Units that are a volume: kg per unit, assuming roughly water density.
VOLUME_UNITS: Dict[str, float] = {
    "cup": 0.24,
    "cups": 0.24,
    "tbsp": 0.015,
    "tablespoon": 0.015,
    "tablespoons": 0.015,
    "tsp": 0.005,
    "teaspoon": 0.005,
    "teaspoons": 0.005,
    "ml": 0.001,
    "l": 1.0,
    "liter": 1.0,
    "liters": 1.0,
}

# Count units: multiples (or fractions) of the ingredient's per-piece weight.
COUNT_UNITS: Dict[str, float] = {
    "piece": 1.0,
    "pieces": 1.0,
    "item": 1.0,
    "items": 1.0,
    "whole": 1.0,
    "head": 1.0,
    "bunch": 1.0,
    "fillet": 1.0,
    "fillets": 1.0,
    "pair": 2.0,
    "dozen": 12.0,
    "slice": 0.3,
    "slices": 0.3,
    "clove": 0.1,
    "cloves": 0.1,
}

# Container units have a fixed typical net weight regardless of contents.
CONTAINER_UNITS: Dict[str, float] = {
    "can": 0.4,
    "cans": 0.4,
    "package": 0.5,
    "packages": 0.5,
    "bag": 0.5,
    "bags": 0.5,
    "box": 0.4,
    "boxes": 0.4,
    "bottle": 0.5,
    "bottles": 0.5,
    "jar": 0.3,
    "jars": 0.3,
}


INGREDIENT_FACTORS: Dict[str, IngredientFactors] = {
    # unit_weight_kg, cost_per_kg, co2_per_kg, category, aliases
    "tomato": _factors(0.15, 5.00, 1.4, "produce", ["tomatoes", "roma tomato", "cherry tomato", "grape tomato"]),
    "onion": _factors(0.15, 3.33, 0.5, "produce", ["onions", "yellow onion", "white onion", "red onion"]),
    "garlic": _factors(0.05, 10.00, 0.5, "produce", ["garlic clove", "garlic cloves"]),
    "potato": _factors(0.20, 2.00, 0.5, "produce", ["potatoes", "russet potato", "red potato", "yukon gold"]),
    "carrot": _factors(0.10, 3.00, 0.4, "produce", ["carrots", "baby carrots"]),
    "broccoli": _factors(0.30, 5.83, 0.8, "produce", ["broccoli florets", "broccoli head"]),
    "spinach": _factors(0.15, 16.67, 0.5, "produce", ["baby spinach", "spinach leaves"]),
    "lettuce": _factors(0.25, 6.00, 0.7, "produce", ["romaine lettuce", "iceberg lettuce", "lettuce head"]),
    "bell pepper": _factors(0.15, 6.67, 1.1, "produce", ["bell peppers", "red pepper", "green pepper", "yellow pepper", "capsicum"]),
    "cucumber": _factors(0.20, 3.75, 0.7, "produce", ["cucumbers", "english cucumber"]),
    "celery": _factors(0.40, 3.75, 0.4, "produce", ["celery stalks", "celery sticks"]),
    "mushroom": _factors(0.10, 15.00, 0.8, "produce", ["mushrooms", "button mushrooms", "cremini", "portobello", "shiitake"]),
    "zucchini": _factors(0.20, 5.00, 0.6, "produce", ["zucchinis", "courgette"]),
    "asparagus": _factors(0.20, 15.00, 1.0, "produce", ["asparagus spears"]),
    "corn": _factors(0.20, 2.50, 1.0, "produce", ["corn on the cob", "sweet corn", "corn kernels"]),
    "cabbage": _factors(0.50, 3.00, 0.4, "produce", ["green cabbage", "red cabbage", "napa cabbage"]),
    "cauliflower": _factors(0.50, 5.00, 0.7, "produce", ["cauliflower head", "cauliflower florets"]),
    "green beans": _factors(0.15, 13.33, 0.8, "produce", ["string beans", "snap beans"]),
    "peas": _factors(0.15, 13.33, 0.8, "produce", ["green peas", "snow peas", "snap peas"]),
    "kale": _factors(0.15, 16.67, 0.5, "produce", ["kale leaves", "baby kale"]),
    "avocado": _factors(0.20, 7.50, 2.5, "produce", ["avocados"]),
    "eggplant": _factors(0.35, 4.29, 0.8, "produce", ["aubergine", "eggplants"]),
    "apple": _factors(0.18, 4.17, 0.4, "produce", ["apples", "green apple", "red apple", "gala apple", "fuji apple"]),
    "banana": _factors(0.12, 2.08, 0.9, "produce", ["bananas"]),
    "orange": _factors(0.20, 3.75, 0.5, "produce", ["oranges", "navel orange"]),
    "lemon": _factors(0.10, 5.00, 0.5, "produce", ["lemons", "lemon juice"]),
    "lime": _factors(0.07, 5.00, 0.5, "produce", ["limes", "lime juice"]),
    "strawberry": _factors(0.20, 15.00, 0.5, "produce", ["strawberries"]),
    "blueberry": _factors(0.15, 23.33, 0.6, "produce", ["blueberries"]),
    "grape": _factors(0.25, 10.00, 0.7, "produce", ["grapes", "red grapes", "green grapes"]),
    "mango": _factors(0.30, 5.00, 1.5, "produce", ["mangos", "mangoes"]),
    "pineapple": _factors(1.0, 3.00, 1.0, "produce", ["pineapples"]),
    "watermelon": _factors(5.0, 1.20, 0.4, "produce", ["watermelons"]),
    "peach": _factors(0.15, 6.67, 0.5, "produce", ["peaches"]),
    "pear": _factors(0.18, 5.56, 0.4, "produce", ["pears"]),
    "chicken breast": _factors(0.17, 20.59, 6.9, "protein", ["chicken breasts", "boneless chicken", "skinless chicken breast"]),
    "chicken thigh": _factors(0.12, 20.83, 6.9, "protein", ["chicken thighs", "bone-in chicken thigh"]),
    "chicken": _factors(0.15, 20.00, 6.9, "protein", ["whole chicken", "chicken pieces"]),
    "ground beef": _factors(0.25, 20.00, 27.0, "protein", ["minced beef", "beef mince", "hamburger meat"]),
    "beef steak": _factors(0.22, 36.36, 27.0, "protein", ["steak", "ribeye", "sirloin", "filet mignon", "beef"]),
    "pork chop": _factors(0.18, 19.44, 12.1, "protein", ["pork chops", "pork loin"]),
    "ground pork": _factors(0.25, 16.00, 12.1, "protein", ["minced pork", "pork mince"]),
    "bacon": _factors(0.15, 33.33, 12.1, "protein", ["bacon strips", "streaky bacon"]),
    "sausage": _factors(0.10, 15.00, 12.1, "protein", ["sausages", "italian sausage", "breakfast sausage"]),
    "ham": _factors(0.10, 20.00, 12.1, "protein", ["sliced ham", "deli ham"]),
    "lamb": _factors(0.20, 50.00, 39.2, "protein", ["lamb chop", "lamb chops", "ground lamb"]),
    "turkey": _factors(0.15, 20.00, 10.9, "protein", ["turkey breast", "ground turkey", "deli turkey"]),
    "salmon": _factors(0.17, 35.29, 5.4, "protein", ["salmon fillet", "salmon filet", "smoked salmon"]),
    "tuna": _factors(0.15, 16.67, 5.4, "protein", ["tuna steak", "canned tuna", "tuna fish"]),
    "shrimp": _factors(0.15, 40.00, 12.0, "protein", ["shrimps", "prawns", "jumbo shrimp"]),
    "cod": _factors(0.17, 29.41, 4.0, "protein", ["cod fillet", "atlantic cod"]),
    "tilapia": _factors(0.15, 26.67, 4.0, "protein", ["tilapia fillet"]),
    "crab": _factors(0.15, 80.00, 5.0, "protein", ["crab meat", "crab legs"]),
    "egg": _factors(0.06, 5.83, 4.8, "protein", ["eggs", "large egg", "large eggs"]),
    "tofu": _factors(0.20, 12.50, 2.0, "protein", ["firm tofu", "silken tofu", "extra firm tofu"]),
    "tempeh": _factors(0.20, 17.50, 1.0, "protein", []),
    "black beans": _factors(0.25, 6.00, 0.8, "protein", ["canned black beans"]),
    "chickpeas": _factors(0.25, 6.00, 0.8, "protein", ["garbanzo beans", "canned chickpeas"]),
    "lentils": _factors(0.20, 10.00, 0.9, "protein", ["red lentils", "green lentils", "brown lentils"]),
    "milk": _factors(0.24, 2.08, 3.2, "dairy", ["whole milk", "skim milk", "2% milk"]),
    "cheese": _factors(0.10, 20.00, 13.5, "dairy", ["cheddar", "cheddar cheese", "swiss cheese", "mozzarella"]),
    "parmesan": _factors(0.05, 30.00, 13.5, "dairy", ["parmesan cheese", "parmigiano reggiano", "grated parmesan"]),
    "butter": _factors(0.05, 15.00, 12.0, "dairy", ["unsalted butter", "salted butter"]),
    "cream": _factors(0.12, 12.50, 4.5, "dairy", ["heavy cream", "whipping cream", "half and half"]),
    "yogurt": _factors(0.17, 7.35, 2.5, "dairy", ["greek yogurt", "plain yogurt"]),
    "sour cream": _factors(0.12, 12.50, 3.0, "dairy", []),
    "cream cheese": _factors(0.10, 20.00, 8.0, "dairy", ["philadelphia"]),
    "rice": _factors(0.18, 2.78, 4.0, "grains", ["white rice", "brown rice", "jasmine rice", "basmati rice"]),
    "pasta": _factors(0.15, 5.00, 1.5, "grains", ["spaghetti", "penne", "linguine", "fettuccine", "macaroni"]),
    "bread": _factors(0.05, 6.00, 1.5, "grains", ["white bread", "whole wheat bread", "bread slice", "bread slices"]),
    "flour": _factors(0.12, 2.08, 0.7, "grains", ["all-purpose flour", "wheat flour", "whole wheat flour"]),
    "oats": _factors(0.08, 5.00, 1.0, "grains", ["rolled oats", "oatmeal", "steel cut oats"]),
    "quinoa": _factors(0.17, 11.76, 1.2, "grains", []),
    "tortilla": _factors(0.04, 7.50, 1.2, "grains", ["tortillas", "flour tortilla", "corn tortilla", "wrap"]),
    "noodles": _factors(0.15, 6.67, 1.5, "grains", ["egg noodles", "rice noodles", "ramen noodles", "udon"]),
    "olive oil": _factors(0.015, 20.00, 3.5, "condiments", ["extra virgin olive oil", "evoo"]),
    "vegetable oil": _factors(0.015, 6.67, 3.0, "condiments", ["canola oil", "cooking oil"]),
    "soy sauce": _factors(0.015, 10.00, 1.0, "condiments", ["soya sauce", "tamari"]),
    "ketchup": _factors(0.02, 5.00, 1.5, "condiments", ["tomato ketchup", "catsup"]),
    "mustard": _factors(0.015, 6.67, 0.8, "condiments", ["dijon mustard", "yellow mustard"]),
    "mayonnaise": _factors(0.015, 10.00, 2.5, "condiments", ["mayo"]),
    "honey": _factors(0.02, 15.00, 0.5, "condiments", []),
    "sugar": _factors(0.015, 3.33, 1.0, "condiments", ["white sugar", "brown sugar", "granulated sugar"]),
    "salt": _factors(0.005, 4.00, 0.1, "condiments", ["table salt", "sea salt", "kosher salt"]),
    "pepper": _factors(0.002, 25.00, 0.5, "condiments", ["black pepper", "ground pepper"]),
    "vinegar": _factors(0.015, 6.67, 0.5, "condiments", ["white vinegar", "apple cider vinegar", "balsamic vinegar", "rice vinegar"]),
    "tomato sauce": _factors(0.12, 8.33, 1.5, "condiments", ["marinara sauce", "pasta sauce", "tomato paste"]),
    "basil": _factors(0.01, 50.00, 0.3, "produce", ["fresh basil", "basil leaves"]),
    "cilantro": _factors(0.03, 25.00, 0.3, "produce", ["fresh cilantro", "coriander"]),
    "parsley": _factors(0.03, 25.00, 0.3, "produce", ["fresh parsley", "italian parsley"]),
    "ginger": _factors(0.05, 10.00, 0.5, "produce", ["fresh ginger", "ginger root"]),
    "rosemary": _factors(0.01, 50.00, 0.3, "produce", ["fresh rosemary"]),
    "thyme": _factors(0.01, 50.00, 0.3, "produce", ["fresh thyme"]),
    "almonds": _factors(0.03, 25.00, 2.3, "other", ["almond", "sliced almonds"]),
    "peanuts": _factors(0.03, 13.33, 1.2, "other", ["peanut", "roasted peanuts"]),
    "walnuts": _factors(0.03, 33.33, 1.0, "other", ["walnut", "walnut pieces"]),
    "peanut butter": _factors(0.03, 16.67, 1.2, "other", []),
}


def normalize_name(name: str) -> str:
    return " ".join(name.lower().split())


def _singular(name: str) -> Optional[str]:
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("oes") or name.endswith("ches") or name.endswith("shes"):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return None


def _build_alias_index(table: Dict[str, IngredientFactors]) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for canonical, factors in table.items():
        for alias in factors.get("aliases", []):
            index.setdefault(normalize_name(alias), canonical)
    return index


def find_ingredient(
    name: str,
    table: Optional[Dict[str, IngredientFactors]] = None,
) -> Optional[IngredientFactors]:
    """
    Look up the factors for an ingredient name.

    Tries the exact (case-insensitive, whitespace-trimmed) name, then the
    aliases, then a naive singular form. Returns None on a lookup miss.
    """
    if table is None:
        table = INGREDIENT_FACTORS
    aliases = _ALIAS_INDEX if table is INGREDIENT_FACTORS else _build_alias_index(table)

    normalized = normalize_name(name)
    candidates = [normalized]
    singular = _singular(normalized)
    if singular:
        candidates.append(singular)

    for candidate in candidates:
        if candidate in table:
            return table[candidate]
        if candidate in aliases:
            return table[aliases[candidate]]
    return None


_ALIAS_INDEX = _build_alias_index(INGREDIENT_FACTORS)

