from typing import Iterable

from clovet.domain.models.wardrobe import WardrobeFeatureAnalysis


def system_prompt() -> str:
    return (
        "You are a fashion stylist for secondhand and vintage marketplaces. "
        "Return strict JSON only."
    )


def _item_line(item) -> str:
    extras = [v for v in (getattr(item, "color", None), getattr(item, "brand", None)) if v]
    details = ", ".join([item.category, *extras])
    return f"- {item.name} ({details})"


def user_task(analysis: WardrobeFeatureAnalysis, items: Iterable) -> str:
    wardrobe = "\n".join(_item_line(it) for it in items) or "- (empty)"

    preferences = (
        "USER PREFERENCES:\n"
        f"- Favorite colors: {', '.join(analysis.colors) or 'Not specified'}\n"
        f"- Preferred styles: {', '.join(analysis.styles) or 'Not specified'}\n"
        f"- Frequent brands: {', '.join(analysis.brands) or 'Not specified'}"
    )

    output_format = (
        '{"searchQueries":["..."],"styleInsights":["..."],'
        '"recommendations":["..."],"missingPieces":["..."]}'
    )

    return (
        "Analyze the WARDROBE and suggest what to look for next.\n\n"
        "WARDROBE:\n" + wardrobe + "\n\n" +
        preferences + "\n\n"
        "RULES:\n"
        "- searchQueries: 2-3 short marketplace search terms that fill gaps or add versatile pieces\n"
        "- styleInsights: 1-2 notes on the current palette and style direction\n"
        "- recommendations: 2-3 specific items that work with existing pieces\n"
        "- missingPieces: 1-2 key items the wardrobe lacks\n"
        "- Prefer timeless, sustainable, secondhand-friendly pieces\n"
        "- Format: strict JSON, every field a list of strings\n\n"
        "OUTPUT FORMAT: " + output_format
    )
