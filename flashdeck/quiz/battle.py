"""Battle quiz: a player fights enemies by answering multiple-choice questions."""

import random
from dataclasses import dataclass
from typing import Optional

_rng = random.Random()

# name, health, damage, experience
ENEMY_TYPES = (
    ("Goblin", 50, 10, 30),
    ("Orc", 80, 15, 50),
    ("Dragon", 120, 20, 100),
    ("Dark Wizard", 100, 25, 80),
    ("Ancient Beast", 150, 30, 120),
)


@dataclass
class Player:
    health: int = 100
    max_health: int = 100
    level: int = 1
    experience: int = 0
    experience_to_next_level: int = 100
    
    @property
    def is_defeated(self) -> bool:
        return self.health <= 0
    
    @property
    def attack_damage(self) -> int:
        return 20 + self.level * 5
    
    def gain_experience(self, amount: int) -> bool:
        """Add experience; returns True if the player levelled up."""
        self.experience += amount
        if self.experience >= self.experience_to_next_level:
            self.level_up()
            return True
        return False
    
    def level_up(self) -> None:
        self.level += 1
        self.max_health += 20
        self.health = self.max_health
        self.experience = 0
        self.experience_to_next_level = self.level * 100
    
    def heal(self, amount: int) -> None:
        self.health = min(self.health + amount, self.max_health)
    
    def take_damage(self, amount: int) -> None:
        self.health = max(0, self.health - amount)


@dataclass
class Enemy:
    name: str
    health: int
    max_health: int
    damage: int
    experience_value: int
    
    @property
    def is_defeated(self) -> bool:
        return self.health <= 0
    
    @classmethod
    def create(cls, level: int, rng: Optional[random.Random] = None) -> "Enemy":
        """Random enemy archetype, scaled by the player's level."""
        rng = rng or _rng
        name, health, damage, exp = rng.choice(ENEMY_TYPES)
        multiplier = level * 0.5 + 1.0
        scaled_health = int(health * multiplier)
        return cls(
            name=name,
            health=scaled_health,
            max_health=scaled_health,
            damage=int(damage * multiplier),
            experience_value=int(exp * multiplier),
        )


@dataclass
class BattleEvent:
    """What happened as a result of one graded answer."""
    damage_dealt: int = 0
    damage_taken: int = 0
    enemy_defeated: bool = False
    leveled_up: bool = False
    player_defeated: bool = False


class BattleState:
    """Player and current enemy for one battle quiz session."""
    
    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or _rng
        self.player = Player()
        self.enemy = Enemy.create(self.player.level, self._rng)
        self.enemies_defeated = 0
    
    @property
    def is_over(self) -> bool:
        return self.player.is_defeated
    
    def apply(self, correct: bool) -> BattleEvent:
        """
        Apply a graded answer.
        
        A correct answer hits the enemy; a defeated enemy grants experience
        and is replaced by a new one. A wrong answer lets the enemy hit back.
        """
        event = BattleEvent()
        
        if correct:
            event.damage_dealt = self.player.attack_damage
            self.enemy.health -= event.damage_dealt
            if self.enemy.is_defeated:
                event.enemy_defeated = True
                event.leveled_up = self.player.gain_experience(self.enemy.experience_value)
                self.enemies_defeated += 1
                self.enemy = Enemy.create(self.player.level, self._rng)
        else:
            event.damage_taken = self.enemy.damage
            self.player.take_damage(self.enemy.damage)
            event.player_defeated = self.player.is_defeated
        
        return event
