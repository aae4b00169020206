from apiary.modules.perks.service import PerkModifiers, PerkModifierService

__all__ = ["PerkModifiers", "PerkModifierService"]
