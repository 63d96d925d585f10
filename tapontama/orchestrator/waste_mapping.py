from types import MappingProxyType

from tapontama.orchestrator.contracts import CategoryMappingEntry, WasteCategory

# Catch-all key, used whenever a provider label is not in the table
GENERAL_WASTE = "general_waste"

_R = WasteCategory.RECYCLABLE
_B = WasteCategory.BIODEGRADABLE
_N = WasteCategory.NON_BIODEGRADABLE

WASTE_MAPPING = MappingProxyType({
    "plastic_bottle": CategoryMappingEntry(
        _R, "Clean and place in recycling bin. Check local recycling guidelines for proper disposal."),
    "plastic_bag": CategoryMappingEntry(
        _R, "Take to grocery store plastic bag recycling bins. Don't put in curbside recycling."),
    "paper": CategoryMappingEntry(
        _R, "Remove any plastic coating and place in paper recycling bin."),
    "cardboard": CategoryMappingEntry(
        _R, "Flatten and place in cardboard recycling. Remove any tape or staples."),
    "glass_bottle": CategoryMappingEntry(
        _R, "Clean thoroughly and place in glass recycling container."),
    "aluminum_can": CategoryMappingEntry(
        _R, "Clean and place in metal recycling bin. Aluminum cans are highly recyclable!"),
    "food_waste": CategoryMappingEntry(
        _B, "Perfect for composting! Food waste makes excellent fertilizer."),
    "fruit_peel": CategoryMappingEntry(
        _B, "Compost this organic material to create nutrient-rich soil for plants!"),
    "vegetable_scraps": CategoryMappingEntry(
        _B, "Great for composting! These scraps will decompose naturally."),
    "styrofoam": CategoryMappingEntry(
        _N, "This goes to general waste. Consider using reusable containers in the future!"),
    "electronics": CategoryMappingEntry(
        _N, "Take to an e-waste recycling center. Never put electronics in regular trash!"),
    "battery": CategoryMappingEntry(
        _N, "Take to battery recycling center. Batteries contain harmful chemicals."),
    GENERAL_WASTE: CategoryMappingEntry(
        _N, "This item should go in your general waste bin."),
})
