"""
Application constants.
Tier configuration, level names, penalties, constellations and defaults.
"""
import os

# === LEVELING ===

MAX_LEVEL = 100
BASE_LEVEL_INCREMENT = 100       # XP needed to go from level 1 to level 2
INCREMENT_INCREASE_BASE = 50     # Growth of the increment per level, scaled by tier

# One multiplier per tier, applied to INCREMENT_INCREASE_BASE
TIER_POINT_MULTIPLIERS = (1.0, 1.1, 1.2, 1.3, 1.5, 1.7, 2.0, 2.3, 2.7, 3.0)

TIER_INFO = (
    {"name": "Unknown Blades", "slug": "unknown-blades", "icon": "⚔️", "min_level": 1, "max_level": 10,
     "tier_group": 1, "tier_entry_bonus": 0,
     "welcome_message": "You were no one. Just dust and instinct. But the blade remembers who dares to hold it."},
    {"name": "Vowbreakers", "slug": "vowbreakers", "icon": "🛡️", "min_level": 11, "max_level": 20,
     "tier_group": 1, "tier_entry_bonus": 100,
     "welcome_message": "You swore once. Then you shattered it. Power lives in the broken oaths, and you are now their kin."},
    {"name": "Silent Names", "slug": "silent-names", "icon": "🔥", "min_level": 21, "max_level": 30,
     "tier_group": 2, "tier_entry_bonus": 250,
     "welcome_message": "They won't speak your name, but they feel your echo in the dark. Silence cuts deeper than screams."},
    {"name": "Forgotten Lineage", "slug": "forgotten-lineage", "icon": "🐍", "min_level": 31, "max_level": 40,
     "tier_group": 2, "tier_entry_bonus": 500,
     "welcome_message": "No bloodline. No crown. Just scars passed from the void. You are born again of nothing."},
    {"name": "Ancient Kin", "slug": "ancient-kin", "icon": "💀", "min_level": 41, "max_level": 50,
     "tier_group": 3, "tier_entry_bonus": 750,
     "welcome_message": "Older than memory. Deeper than regret. You rise with bones beneath you and fire behind your eyes."},
    {"name": "Doompath Heralds", "slug": "doompath-heralds", "icon": "🌑", "min_level": 51, "max_level": 60,
     "tier_group": 3, "tier_entry_bonus": 1000,
     "welcome_message": "The sky darkens when you walk. You are no longer part of the world. You are its warning."},
    {"name": "Names Lost to Fire", "slug": "names-lost-to-fire", "icon": "🩶", "min_level": 61, "max_level": 70,
     "tier_group": 4, "tier_entry_bonus": 1500,
     "welcome_message": "What you were burned away. What remains has no name, only flame."},
    {"name": "Myth Engines", "slug": "myth-engines", "icon": "⚙️", "min_level": 71, "max_level": 80,
     "tier_group": 4, "tier_entry_bonus": 2000,
     "welcome_message": "You are no longer flesh and will. You are function and fury. A system that breaks systems."},
    {"name": "Elders of Dust", "slug": "elders-of-dust", "icon": "🕷️", "min_level": 81, "max_level": 90,
     "tier_group": 5, "tier_entry_bonus": 2500,
     "welcome_message": "Time failed to kill you. History bent around your shadow. You are not remembered. You are endured."},
    {"name": "Final Forms", "slug": "final-forms", "icon": "🌑", "min_level": 91, "max_level": 100,
     "tier_group": 5, "tier_entry_bonus": 5000,
     "welcome_message": "No more trials. No more thresholds. This is not potential. This is you, fully formed and feared."},
)

LEVEL_NAMES = (
    # Tier 1 - Unknown Blades
    "Ashborn", "Hollow Wolf", "Grey Fang", "Nameless Stride", "Iron Howl",
    "First Fang", "Ragetooth", "Bloodless", "Stoneveil", "Shadecaller",
    # Tier 2 - Vowbreakers
    "Driftblade", "Red Crest", "Thornwrithe", "Coldbrand", "Vow Eater",
    "Dustwake", "Hollowmark", "Chainspire", "Dirge Kin", "Lowborn Fang",
    # Tier 3 - Silent Names
    "Echo Vein", "Ruinborne", "Black Ember", "Crimson Husk", "Gravemark",
    "Nine Fade", "Dead Script", "Blind Spire", "Murk Sigil", "Split Veil",
    # Tier 4 - Forgotten Lineage
    "Ashrot", "Spitewire", "Crooked Sun", "Iron Veldt", "Last Fang",
    "Dustgore", "Gutterborn", "Seventh Coil", "Writ Cinder", "Black Throat",
    # Tier 5 - Ancient Kin
    "Hexgrave", "Bloodbrand", "Oathsplitter", "Mournedge", "Deep Hollow",
    "Glassbone", "Rotblade", "Flint Ghost", "Palejaw", "Chained Crown",
    # Tier 6 - Doompath Heralds
    "Scorchhelm", "Ebon Root", "Blackridge", "Rustmaw", "Deadwake",
    "Gravelorn", "Bladeshade", "Voidtongue", "Murk Vow", "Gravetooth",
    # Tier 7 - Names Lost to Fire
    "Coldspire", "Ashgrin", "Red Silence", "Skullbent", "Duskworn",
    "Greywake", "Flamekeeper", "Riftjaw", "Frostborn Coil", "Stillgore",
    # Tier 8 - Myth Engines
    "Wrought One", "Grindclad", "Thornking", "Sigilworn", "Embercall",
    "Voidstitcher", "Blight Crest", "Forged Maw", "Burndagger", "Rust Saint",
    # Tier 9 - Elders of Dust
    "Goreveil", "Blackcoil", "Spinebrand", "Crackjaw", "Shroudkin",
    "Fangroot", "Banewake", "Vessel of Nine", "The Cutmark", "Dusttaker",
    # Tier 10 - Final Forms
    "The Ash Wolf", "Wyrmblood", "Redrift", "The Lost Fang", "Nullmark",
    "Broken Throne", "Crownless Lord", "Steelwither", "Mouth of Stone", "Endborne",
)

FALLBACK_LEVEL_NAME = "Champion"

# === RECORDS & TASKS ===

MAX_CONTRIBUTION_LEVEL = 4
VALUE_THRESHOLDS = (5, 10, 15, 20)  # Default intensity thresholds for contribution levels

DEFAULT_TASK_COLOR = "hsl(0 0% 50%)"
UNASSIGNED_TASK_NAME = "Unassigned"
UNASSIGNED_TASK_COLOR = "#8884d8"

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"

GOAL_INTERVAL_DAILY = "daily"
GOAL_INTERVAL_WEEKLY = "weekly"
GOAL_INTERVAL_MONTHLY = "monthly"

GOAL_TYPE_AT_LEAST = "at_least"
GOAL_TYPE_NO_MORE_THAN = "no_more_than"

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

DEFAULT_TASK_DEFINITIONS = (
    {"id": "work", "name": "Work", "color": "hsl(200 100% 75%)"},
    {"id": "exercise", "name": "Exercise", "color": "hsl(120 70% 70%)"},
    {"id": "learning", "name": "Learning", "color": "hsl(50 100% 70%)"},
    {"id": "personal", "name": "Personal", "color": "hsl(280 70% 80%)"},
    {"id": "reading", "name": "Reading", "color": "hsl(30 100% 75%)"},
    {"id": "other", "name": "Other", "color": "hsl(0 0% 75%)"},
)

# === PENALTIES & STREAKS ===

CONSISTENCY_BREACH_DAYS = 2        # Days without any record before a breach fires
CONSISTENCY_BREACH_PENALTY = 100
DARK_STREAK_PENALTY = 250
DARE_DECLINE_PENALTY_FRACTION = 0.5

STREAK_MILESTONES = (7, 14, 30)    # Each grants one freeze crystal per task

BREACH_KIND_CONSISTENCY = "consistency"
BREACH_KIND_DARK_STREAK = "dark_streak"
BREACH_KIND_PACT = "pact"

BREACH_STATUS_BREACHED = "breached"
BREACH_STATUS_DARE_ACCEPTED = "dare_accepted"
BREACH_STATUS_DECLINED = "declined"
BREACH_STATUS_FROZEN = "frozen"

DARE_POOL = (
    "Do 50 push-ups before the sun sets.",
    "Spend one hour without a screen and write down what you noticed.",
    "Take a cold shower and log how long you lasted.",
    "Walk 5,000 steps before you open any feed.",
    "Write one page about why the streak mattered to you.",
    "Wake up 30 minutes earlier tomorrow and spend the time on the broken task.",
    "Clean one neglected corner of your space, fully.",
    "Log the broken task twice tomorrow.",
)

# === CONSTELLATIONS ===

CONSTELLATIONS = (
    {
        "task_id": "work",
        "task_name": "Work",
        "task_color": "hsl(200 100% 75%)",
        "nodes": (
            {"id": "work-1", "name": "Focused Start", "description": "Begin the journey of dedicated effort.", "cost": 50},
            {"id": "work-2", "name": "Deep Work Initiate", "description": "Unlock the ability to concentrate for extended periods.", "cost": 150},
            {"id": "work-3", "name": "Productivity Spark", "description": "A glimmer of true efficiency.", "cost": 300},
            {"id": "work-4", "name": "Overtime Resilience", "description": "Pushing beyond the normal limits.", "cost": 500},
            {"id": "work-5", "name": "Flow State", "description": "The pinnacle of focus, where work becomes effortless.", "cost": 1000},
        ),
    },
    {
        "task_id": "exercise",
        "task_name": "Exercise",
        "task_color": "hsl(120 70% 70%)",
        "nodes": (
            {"id": "exercise-1", "name": "First Step", "description": "The journey of a thousand miles begins with a single step.", "cost": 50},
            {"id": "exercise-2", "name": "Endurance I", "description": "Conditioning the body for longer trials.", "cost": 150},
            {"id": "exercise-3", "name": "Strength I", "description": "The foundation of physical power.", "cost": 300},
            {"id": "exercise-4", "name": "Endurance II", "description": "Pushing past previous limits of stamina.", "cost": 500},
            {"id": "exercise-5", "name": "Peak Physique", "description": "Mastery over one's own physical form.", "cost": 1000},
        ),
    },
    {
        "task_id": "learning",
        "task_name": "Learning",
        "task_color": "hsl(50 100% 70%)",
        "nodes": (
            {"id": "learning-1", "name": "Open Mind", "description": "The first step to knowledge is admitting you know nothing.", "cost": 50},
            {"id": "learning-2", "name": "Curious Mind", "description": "Actively seeking new information and perspectives.", "cost": 150},
            {"id": "learning-3", "name": "Studious Habit", "description": "Building the discipline of regular learning.", "cost": 300},
            {"id": "learning-4", "name": "Knowledge Synthesis", "description": "Connecting disparate ideas into a coherent whole.", "cost": 500},
            {"id": "learning-5", "name": "Sage-like Wisdom", "description": "A deep and profound understanding.", "cost": 1000},
        ),
    },
)

# === ACHIEVEMENTS ===

ACHIEVEMENT_CATEGORY_LEVEL = "level"
ACHIEVEMENT_CATEGORY_STREAK = "streak"
ACHIEVEMENT_CATEGORY_SKILLS = "skills"

ACHIEVEMENTS = (
    {"id": "level-10", "name": "Vowbreaker", "category": ACHIEVEMENT_CATEGORY_LEVEL, "threshold": 10,
     "description": "Reach Level 10 and enter the Vowbreakers tier."},
    {"id": "level-25", "name": "Silent Name", "category": ACHIEVEMENT_CATEGORY_LEVEL, "threshold": 25,
     "description": "Reach Level 25, a whisper in the void."},
    {"id": "level-50", "name": "Ancient Kin", "category": ACHIEVEMENT_CATEGORY_LEVEL, "threshold": 50,
     "description": "Reach Level 50 and join the ranks of the ancients."},
    {"id": "level-100", "name": "Final Form", "category": ACHIEVEMENT_CATEGORY_LEVEL, "threshold": MAX_LEVEL,
     "description": "Reach the pinnacle, Level 100. You are Endborne."},
    {"id": "streak-7", "name": "Week of Will", "category": ACHIEVEMENT_CATEGORY_STREAK, "threshold": 7,
     "description": "Maintain any streak for 7 consecutive days."},
    {"id": "streak-30", "name": "Month of Iron", "category": ACHIEVEMENT_CATEGORY_STREAK, "threshold": 30,
     "description": "Maintain any streak for 30 consecutive days."},
    {"id": "skill-1", "name": "First Spark", "category": ACHIEVEMENT_CATEGORY_SKILLS, "threshold": 1,
     "description": "Unlock your first skill node in any constellation."},
    {"id": "skill-5", "name": "Adept", "category": ACHIEVEMENT_CATEGORY_SKILLS, "threshold": 5,
     "description": "Unlock 5 total skill nodes."},
)

# === DASHBOARD DEFAULTS ===

DEFAULT_CONSISTENCY_DAYS = 30
DEFAULT_TOTAL_DAYS = 30
DEFAULT_DAY_START_TIME = "06:00"

# === ENVIRONMENT ===

DEFAULT_DATABASE_URL = "sqlite:///./sigil.db"
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/sigil"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_SWEEP_TIME = "00:05"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("SIGIL_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
