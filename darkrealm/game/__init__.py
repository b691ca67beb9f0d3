"""Game systems: progression, combat, loot, quests, inventory and the service layer."""
