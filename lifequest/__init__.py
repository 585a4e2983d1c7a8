"""LifeQuest progression engine: XP, levels, streaks, rewards and quests"""

__version__ = "0.1.0"
