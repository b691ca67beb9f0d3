#!/usr/bin/env python3

import argparse

from darkrealm.core.errors import GameLogicError
from darkrealm.core.events import EventManager
from darkrealm.core.rng import create_rng
from darkrealm.game.managers import GameService, LogManager


def play_session(seed: int, character_class: str, fights: int) -> None:
    event_manager = EventManager()
    log_manager = LogManager(event_manager)
    service = GameService(event_manager=event_manager, rng=create_rng(seed))

    hero = service.create_character("Varek", character_class)
    service.accept_quest(hero.id, "quest-awakening")

    for _ in range(fights):
        service.rest(hero.id)
        service.start_combat(hero.id)
        skill_id = service.get_character(hero.id).skills[0].id
        while True:
            try:
                result = service.combat_action(hero.id, skill_id)
            except GameLogicError as e:
                # Out of energy: fall back to fleeing
                log_manager.warning(str(e))
                while not service.flee(hero.id).encounter.is_over:
                    pass
                break
            for line in result.log:
                print(line)
            if result.is_over:
                break
        print()

    for entry in log_manager.get_messages():
        print(entry.format())

    hero = service.get_character(hero.id)
    print(f"\n{hero.name}: level {hero.level}, {hero.experience} XP, {hero.gold} gold, "
          f"{len(hero.inventory)} items carried")


def main():
    parser = argparse.ArgumentParser(description="Play an offline Dark Realm session")
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--class", dest="character_class", default="warrior")
    parser.add_argument("--fights", type=int, default=3)
    args = parser.parse_args()

    try:
        play_session(args.seed, args.character_class, args.fights)
    except KeyboardInterrupt:
        print("\n\nSession interrupted by user")


if __name__ == "__main__":
    main()
