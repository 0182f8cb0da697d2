"""Goblin Cave: a short introductory crawl for level 1-2 characters."""

from __future__ import annotations

from dm_companion.models.enums import Ability, DamageType, Disposition, LightLevel, Skill
from dm_companion.models.module import (
    NPC,
    AdventureModule,
    AttackBlock,
    Check,
    Container,
    DialogueLine,
    Encounter,
    EncounterEnemyRef,
    EncounterScaling,
    Item,
    Lock,
    ModuleRules,
    Objective,
    Room,
    Secret,
    StatBlock,
)


# =============================================================================
# Items and Containers
# =============================================================================

ITEMS = [
    Item(
        id="stone-key",
        name="Notched Stone Key",
        description="A palm-sized key carved from riverstone with crude goblin runes.",
        type="key",
    ),
    Item(
        id="torch-bundle",
        name="Bundle of Torches",
        description="Six pitch-soaked torches wrapped in twine.",
        type="gear",
    ),
    Item(
        id="rations-goblin",
        name="Goblin Rations",
        description="Dried fish, sour mushrooms, and hard cakes. Edible, barely.",
        type="provisions",
    ),
    Item(
        id="dagger-plus1",
        name="Dagger, +1",
        description="A well-balanced blade with a dull sheen that catches the eye.",
        type="weapon",
    ),
]

CONTAINERS = [
    Container(
        id="chest-01",
        name="Sturdy Wooden Chest",
        description="Iron-banded chest tucked in a niche with scuffed stone around it.",
        lock=Lock(is_locked=True, key_item_id="stone-key", pick_dc=15, force_dc=14),
        contents=["50 gp", "dagger-plus1"],
    ),
]

# =============================================================================
# Stat Blocks
# =============================================================================

SCIMITAR = AttackBlock(
    name="Scimitar",
    bonus=4,
    damage_dice="1d6+2",
    damage_type=DamageType.SLASHING,
    reach="5 ft",
    formatted="+4 to hit, 5 avg slashing",
)

SHORTBOW = AttackBlock(
    name="Shortbow",
    bonus=4,
    damage_dice="1d6+2",
    damage_type=DamageType.PIERCING,
    range="80/320 ft",
    formatted="+4 to hit, 5 avg piercing",
)

NIMBLE_ESCAPE = "Nimble Escape: Disengage or Hide as a bonus action"

GOBLIN_GUARD = StatBlock(
    cr=0.25,
    ac=15,
    hp=7,
    speed="30 ft",
    initiative_mod=2,
    abilities={Ability.DEX: 2},
    skills={Skill.STEALTH: 6, Skill.PERCEPTION: 2},
    passive_perception=9,
    senses="darkvision 60 ft",
    attacks=[SCIMITAR, SHORTBOW],
    traits=[NIMBLE_ESCAPE],
    languages="Common, Goblin",
)

GOBLIN_LOOKOUT = GOBLIN_GUARD.model_copy(
    update={"ac": 14, "hp": 5, "skills": {Skill.STEALTH: 6, Skill.PERCEPTION: 4}},
)

GOBLIN_HANDLER = GOBLIN_GUARD.model_copy(
    update={
        "hp": 9,
        "attacks": [
            AttackBlock(
                name="Club",
                bonus=4,
                damage_dice="1d4+2",
                damage_type=DamageType.BLUDGEONING,
                reach="5 ft",
            ),
        ],
    },
)

GOBLIN_DOZER = GOBLIN_GUARD.model_copy(update={"hp": 5})

WOLF = StatBlock(
    cr=0.25,
    ac=13,
    hp=11,
    speed="40 ft",
    initiative_mod=2,
    abilities={Ability.STR: 1, Ability.DEX: 2},
    skills={Skill.PERCEPTION: 3, Skill.STEALTH: 4},
    passive_perception=13,
    senses="keen hearing and smell",
    attacks=[
        AttackBlock(
            name="Bite",
            bonus=4,
            damage_dice="2d4+2",
            damage_type=DamageType.PIERCING,
            reach="5 ft",
            formatted="+4 to hit, 7 avg piercing; DC 11 STR save or prone",
        ),
    ],
    traits=["Pack Tactics: Advantage on attacks if ally is within 5 ft of target"],
    languages="",
)

# =============================================================================
# NPCs
# =============================================================================

NPCS = [
    NPC(
        id="snikk",
        name="Snikk",
        role="cowardly goblin lookout",
        disposition=Disposition.WARY,
        motivations=["Avoid pain", "Trade junk for safety", "Impress the boss"],
        dialogue=[
            DialogueLine(cue="threaten", line="No stab Snikk. Snikk talks. Boss hates torches.", intent="stall"),
            DialogueLine(
                cue="bribe",
                line="Shiny for a secret? Chest key is round and cold. Snikk saw stone teeth by the pool.",
                intent="deal",
            ),
            DialogueLine(cue="ask-way", line="Left then down. Hear drips? That way. But gobbos wait.", intent="guide"),
        ],
        stats=StatBlock(
            cr=0.25,
            ac=13,
            hp=7,
            speed="30 ft",
            initiative_mod=2,
            abilities={Ability.DEX: 2},
            skills={Skill.STEALTH: 6, Skill.PERCEPTION: 2},
            passive_perception=9,
            senses="darkvision 60 ft",
            attacks=[
                AttackBlock(
                    name="Shortsword",
                    bonus=4,
                    damage_dice="1d6+2",
                    damage_type=DamageType.SLASHING,
                    reach="5 ft",
                    formatted="+4 to hit, 5 avg slashing",
                ),
            ],
            traits=[NIMBLE_ESCAPE],
            languages="Common, Goblin",
        ),
    ),
]

# =============================================================================
# Encounters
# =============================================================================

ENCOUNTERS = [
    Encounter(
        id="ambush-antechamber",
        name="Goblin Ambush",
        description="Two goblin guards lurk behind jagged rocks while a third watches from a ledge.",
        enemies=[
            EncounterEnemyRef(name="Goblin Guard", stats=GOBLIN_GUARD, count=2),
            EncounterEnemyRef(name="Goblin Lookout", stats=GOBLIN_LOOKOUT),
        ],
        tactics=(
            "They snipe with shortbows then fall back toward the main chamber, "
            "using Nimble Escape to avoid melee."
        ),
        stealth_avoid_dc=13,
        scaling=EncounterScaling(
            easy="Remove the lookout and start with only one guard on duty.",
            medium="As written.",
            hard="Add one more guard and give rocks half cover to archers.",
            deadly=(
                "Start with surprised party unless they beat DC 15 Perception; "
                "add caltrops that slow pursuit."
            ),
        ),
    ),
    Encounter(
        id="kennel-fray",
        name="Wolf Kennel",
        description="A tethered wolf snarls near a pile of bones; a goblin handler prods it with a stick.",
        enemies=[
            EncounterEnemyRef(name="Wolf", stats=WOLF),
            EncounterEnemyRef(name="Goblin Handler", stats=GOBLIN_HANDLER),
        ],
        tactics="Handler commands the wolf to drag foes prone while he retreats and yells for help.",
        stealth_avoid_dc=12,
        treasure=["rations-goblin"],
    ),
    Encounter(
        id="guard-post",
        name="Main Chamber Guard Post",
        description="A cook fire smolders. Two goblins play knucklebones while a third naps.",
        enemies=[
            EncounterEnemyRef(name="Goblin Guard", stats=GOBLIN_GUARD, count=2),
            EncounterEnemyRef(name="Goblin Dozer", stats=GOBLIN_DOZER),
        ],
        tactics=(
            "If alerted by noise from the antechamber, they take positions behind stalagmites "
            "and focus fire on the least armored target."
        ),
        stealth_avoid_dc=11,
        treasure=["stone-key"],
    ),
]

# =============================================================================
# Rooms
# =============================================================================

ROOMS = [
    Room(
        id="entrance",
        name="Cave Mouth",
        description=(
            "A jagged cleft in a low cliff opens into cool darkness. "
            "Damp air carries the smell of smoke and wet fur."
        ),
        light=LightLevel.DIM,
        ambient="Distant drips and the faint clatter of stone on stone.",
        exits={"east": "antechamber"},
        secrets=[
            Secret(
                text="Fresh goblin tracks lead inward; smaller bare prints suggest a wolf pup once roamed here.",
                check=Check(
                    skill=Skill.SURVIVAL,
                    dc=10,
                    on_success="You can estimate at least four goblins use this path.",
                ),
            ),
        ],
    ),
    Room(
        id="antechamber",
        name="Shadowed Antechamber",
        description="Jagged rocks form natural cover and narrow lanes. A soot smear stains the ceiling.",
        light=LightLevel.DARK,
        ambient="A breath of cold air brushes your cheeks when you move.",
        exits={"west": "entrance", "southeast": "main-chamber"},
        encounter_id="ambush-antechamber",
        stealth_dc=13,
        secrets=[
            Secret(
                text="Loose stones can be nudged to create a distraction in the southeast passage.",
                check=Check(
                    skill=Skill.SLEIGHT_OF_HAND,
                    dc=12,
                    on_success="You draw a goblin to investigate, opening a gap to slip past.",
                    on_failure="The clatter alerts the group instead.",
                ),
            ),
        ],
    ),
    Room(
        id="main-chamber",
        name="Main Chamber",
        description=(
            "A broad cavern with a low fire pit, stacked crates, "
            "and a rope leading up to a rickety ledge."
        ),
        light=LightLevel.DIM,
        ambient="The crackle of embers, the rustle of sacks, and occasional goblin chatter.",
        exits={"northwest": "antechamber", "east": "kennel", "south": "treasure-hall"},
        encounter_id="guard-post",
        secrets=[
            Secret(
                text="A stone carving of jagged teeth near the rope marks the boss's personal stash.",
                check=Check(
                    skill=Skill.INVESTIGATION,
                    dc=12,
                    on_success="You spot a faint footprint pointing toward the southern passage.",
                ),
            ),
        ],
    ),
    Room(
        id="kennel",
        name="Wolf Kennel",
        description=(
            "A side chamber reeking of musky fur. "
            "A crude fence and a frayed rope tether sit near a heap of bones."
        ),
        light=LightLevel.DARK,
        ambient="Low growls and the scrape of claws on stone.",
        exits={"west": "main-chamber"},
        encounter_id="kennel-fray",
        items=["rations-goblin"],
    ),
    Room(
        id="treasure-hall",
        name="Boss's Hoard Niche",
        description="A narrow hall opens into a niche where an iron-banded chest rests on stacked slate.",
        light=LightLevel.DARK,
        ambient="Water drops tick into a shallow pool that reflects a faint gleam from metal fittings.",
        exits={"north": "main-chamber"},
        secrets=[
            Secret(
                text="A notched stone keyhole sits under the front lip of the slate pedestal.",
                check=Check(
                    skill=Skill.PERCEPTION,
                    dc=11,
                    on_success="You find the keyhole without touching the chest.",
                ),
            ),
        ],
        # Containers are placed in rooms by id alongside items
        items=["chest-01"],
    ),
]

OBJECTIVES = [
    Objective(
        id="clear-goblins",
        text="Drive off or defeat the goblins.",
        done_if="No hostile goblins remain in main-chamber or antechamber.",
    ),
    Objective(
        id="recover-treasure",
        text="Recover what the goblin boss stole.",
        done_if="Chest chest-01 opened or its contents claimed.",
    ),
    Objective(
        id="spare-snikk",
        text="Resolve Snikk's presence without killing him.",
        done_if="Snikk is not hostile at module end and is alive or has fled.",
    ),
]

GOBLIN_CAVE = AdventureModule(
    id="goblin-cave",
    title="Goblin Cave",
    level_range=(1, 2),
    tags=["intro", "goblins", "cave", "low-light", "level-1"],
    summary=(
        "A short crawl ideal for level 1 groups. Skulk past goblin sentries, bargain with a "
        "cowardly lookout, calm a hungry wolf, and crack the boss's chest."
    ),
    rooms=ROOMS,
    encounters=ENCOUNTERS,
    npcs=NPCS,
    containers=CONTAINERS,
    items=ITEMS,
    objectives=OBJECTIVES,
    rules=ModuleRules(
        stealth=(
            "If the party's group Stealth beats a room's stealth DC or the encounter's stealth "
            "avoid DC, they can bypass or gain advantage on the first round."
        ),
        negotiation=(
            "Offer rations or coin to adjust Snikk's disposition. A DC 12 Persuasion can turn him "
            "neutral; a DC 14 with a small bribe turns him friendly."
        ),
    ),
)
