from recurpreview.models.rule_drafts import RuleDraftRecord

__all__ = [
    "RuleDraftRecord",
]
