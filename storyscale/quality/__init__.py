from storyscale.quality.refine import refine
from storyscale.quality.scorer import QualityContext, QualityScorer, assess, top_weaknesses

__all__ = ["QualityContext", "QualityScorer", "assess", "refine", "top_weaknesses"]
