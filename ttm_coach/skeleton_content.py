"""
Authored work-plan content: one base skeleton per stage plus the override
fragments the planner merges on top. Plain data; the planner copies it before
use so these structures are never modified.
"""
from __future__ import annotations

SKELETON_VERSION = "1.0"

BASE_SKELETONS = {
    "PC": {
        "focus": ["awareness", "pros", "self_revaluation", "info_gathering"],
        "today_action": {
            "id": "awareness_log",
            "est_minutes": 1,
            "steps": ["Rate your mood right now from 0 to 5", "Name one signal your body is giving you"],
        },
        "weekly_plan_cards": [
            {
                "id": "pros_list",
                "type": "pros_list",
                "title": "What you would gain (pros)",
                "checklist": ["Write down two benefits for your daily life", "Link each one to a concrete situation"],
                "when": "Before bed",
                "trigger_if_then": "If it is bedtime, then write two pros",
                "est_minutes": 3,
                "required": True,
            },
            {
                "id": "self_reval",
                "type": "self_revaluation",
                "title": "Connect with your values",
                "checklist": ["Write one value in a single word", "Write one line on how it relates to handling stress"],
                "when": "Weekend",
                "trigger_if_then": "If it is weekend morning, then fill in the values card",
                "est_minutes": 5,
                "required": True,
            },
            {
                "id": "info_gathering",
                "type": "info_gathering",
                "title": "Short information gathering",
                "checklist": ["Read one short article or official leaflet"],
                "when": "Weekdays 19:00",
                "trigger_if_then": "If it is 19:00, then read one piece",
                "est_minutes": 5,
                "required": False,
            },
        ],
        "obstacles": [
            {"obstacle": "It does not feel important", "plan_hint": "Always tie the pros to real moments in your day"},
        ],
        "motivation_hints": {
            "pros": ["Better sleep and focus", "Less irritability"],
            "reframing": [],
        },
        "rules_trace": ["stage=precontemplation -> awareness and emotional processes"],
    },
    "C": {
        "focus": ["values_link", "pros", "small_experiment", "reframing_practice"],
        "today_action": {
            "id": "tiny_experiment",
            "est_minutes": 2,
            "steps": ["One minute of deep breathing", "Name your current feeling in one word"],
        },
        "weekly_plan_cards": [
            {
                "id": "values_link",
                "type": "self_revaluation",
                "title": "Link values to action",
                "checklist": ["One value -> one action", "Decide on one moment to do it"],
                "when": "Weekday mornings",
                "trigger_if_then": "If you are about to leave for work, then note value -> action in one line",
                "est_minutes": 3,
                "required": True,
            },
            {
                "id": "reframe",
                "type": "reframing_practice",
                "title": "Reframing practice",
                "checklist": ["Separate fact and interpretation once"],
                "when": "After work",
                "trigger_if_then": "If you catch yourself sighing, then write a one-line reframe",
                "est_minutes": 2,
                "required": True,
            },
            {
                "id": "small_cand",
                "type": "healthy_activity",
                "title": "Try one small candidate",
                "checklist": ["Either one minute of walking or 30 seconds of shoulder rolls"],
                "when": "After dinner",
                "trigger_if_then": "If dinner is over, then move for 30-60 seconds",
                "est_minutes": 1,
                "required": False,
            },
        ],
        "obstacles": [
            {"obstacle": "Cannot decide", "plan_hint": "Choose only one candidate (no spreading)"},
        ],
        "motivation_hints": {
            "pros": ["Immediate sense of achievement", "Smaller mood swings"],
            "reframing": ["A miss is just data"],
        },
        "rules_trace": ["stage=contemplation -> small experiments"],
    },
    "PR": {
        "focus": ["if_then", "first_session", "reminder", "barrier_solution"],
        "today_action": {
            "id": "setup_1min",
            "est_minutes": 3,
            "steps": ["Put the first session in your calendar", "Place one visual cue"],
        },
        "weekly_plan_cards": [
            {
                "id": "if_then_main",
                "type": "if_then",
                "title": "Run your if-then plan",
                "checklist": ["Fix one trigger (e.g. after brushing teeth)", "Fix one action (e.g. one minute of breathing)"],
                "when": "Daily 19:00",
                "trigger_if_then": "If you have brushed your teeth, then breathe slowly for one minute",
                "est_minutes": 1,
                "required": True,
            },
            {
                "id": "first_session",
                "type": "reinforcement",
                "title": "Fix the first session and a reward",
                "checklist": ["Fix the first session for Wednesday 19:00", "Choose a small reward for afterwards"],
                "when": "Wed 19:00",
                "trigger_if_then": "If it is 19:00, then start; when done, take the reward",
                "est_minutes": 5,
                "required": True,
            },
            {
                "id": "reminder",
                "type": "stimulus_control",
                "title": "Set a reminder",
                "checklist": ["Set a phone notification or physical cue"],
                "when": "Day before the first session",
                "trigger_if_then": "If it is 20:00 the day before, then set the notification",
                "est_minutes": 2,
                "required": True,
            },
        ],
        "obstacles": [
            {"obstacle": "Putting it off when tired", "plan_hint": "Start for one minute; stopping after that is fine"},
            {"obstacle": "Forgetting", "plan_hint": "Use both a notification and a physical cue"},
        ],
        "motivation_hints": {
            "pros": ["Start small and collect successes"],
            "reframing": [],
        },
        "rules_trace": ["stage=preparation -> if-then, first session and barrier plans required"],
    },
    "A": {
        "focus": ["stimulus_control", "alternative_response", "helping_relationship", "reinforcement"],
        "today_action": {
            "id": "micro_reset",
            "est_minutes": 2,
            "steps": ["Roll your shoulders for 30 seconds", "Look into the distance for 30 seconds"],
        },
        "weekly_plan_cards": [
            {
                "id": "stimulus",
                "type": "stimulus_control",
                "title": "Stimulus control",
                "checklist": ["Notifications off after 22:00", "Tidy your desk for 5 minutes"],
                "when": "Daily 22:00",
                "trigger_if_then": "If it is 22:00, then switch notifications off",
                "est_minutes": 5,
                "required": True,
            },
            {
                "id": "alternate",
                "type": "alternative_response",
                "title": "Alternative response",
                "checklist": ["Swap aimless phone use for one minute of stretching"],
                "when": "Before bed",
                "trigger_if_then": "If you notice aimless scrolling, then stretch for one minute",
                "est_minutes": 1,
                "required": True,
            },
            {
                "id": "help",
                "type": "helping_relationship",
                "title": "Helping relationship",
                "checklist": ["Exchange an encouraging message once a week"],
                "when": "Fri 20:00",
                "trigger_if_then": "If it is Friday 20:00, then send the message",
                "est_minutes": 2,
                "required": False,
            },
            {
                "id": "reinforce",
                "type": "reinforcement",
                "title": "Reinforcement plan (rewards)",
                "checklist": ["Pair each active day with a small reward"],
                "when": "Right after the activity",
                "trigger_if_then": "If you finish the activity, then give yourself the reward",
                "est_minutes": 1,
                "required": True,
            },
        ],
        "obstacles": [
            {"obstacle": "Feeling too tired to continue", "plan_hint": "One minute counts; anything more is a bonus"},
        ],
        "motivation_hints": {
            "pros": ["Better sleep quality", "Less grogginess in the morning"],
            "reframing": ["Consistency beats perfection"],
        },
        "rules_trace": ["stage=action -> several behavioural processes"],
    },
    "M": {
        "focus": ["risk_forecast", "slip_recovery", "novelty_change", "helping_relationship"],
        "today_action": {
            "id": "risk_check",
            "est_minutes": 2,
            "steps": ["Write down one high-risk situation this week", "Note one countermeasure"],
        },
        "weekly_plan_cards": [
            {
                "id": "risk",
                "type": "risk_forecast",
                "title": "Anticipate high-risk situations",
                "checklist": ["Check for dinners out or busy periods ahead", "Write one countermeasure for each"],
                "when": "Sun 18:00",
                "trigger_if_then": "If it is Sunday 18:00, then review the week and countermeasures",
                "est_minutes": 4,
                "required": True,
            },
            {
                "id": "slip",
                "type": "slip_recovery",
                "title": "Immediate recovery after a slip",
                "checklist": ["Log it -> one minute of action -> declare a restart"],
                "when": "After a slip",
                "trigger_if_then": "If you notice you skipped it, then do one minute and declare a restart",
                "est_minutes": 2,
                "required": True,
            },
            {
                "id": "novel",
                "type": "novelty_change",
                "title": "Break the routine (change of setting)",
                "checklist": ["Change the place or order once"],
                "when": "Once a week",
                "trigger_if_then": "If it is your weekly slot, then try a change",
                "est_minutes": 3,
                "required": False,
            },
        ],
        "obstacles": [
            {"obstacle": "Boredom or slipping priority", "plan_hint": "Refresh the place, time or reward"},
        ],
        "motivation_hints": {
            "pros": ["Automatic habits save willpower"],
            "reframing": ["A lapse is a signal to learn from"],
        },
        "rules_trace": ["stage=maintenance -> prevention, recovery and renewal"],
    },
}

FRAGMENT_STRESS_HIGH = {
    "today_action": {
        "id": "micro_downshift",
        "est_minutes": 2,
        "steps": ["Three rounds of 3-3-6 breathing", "Slowly roll your shoulders and neck"],
    },
    "weekly_plan_cards": [
        {
            "id": "recovery_break",
            "type": "healthy_activity",
            "title": "Recovery break",
            "checklist": ["Once a day, 1-2 minutes of loosening up or breathing"],
            "when": "15:00",
            "trigger_if_then": "If it is 15:00, then take a recovery break",
            "est_minutes": 2,
            "required": True,
        },
    ],
    "rules_trace": ["RISCI stress high x SMA gap -> micro-intervention first"],
    "prepend_cards": True,
}

FRAGMENT_SELF_EFFICACY_LOW = {
    "today_action": {
        "id": "tiny_success_chain",
        "est_minutes": 2,
        "steps": ["Start for just one minute", "If you did it, take a small reward"],
    },
    "weekly_plan_cards": [
        {
            "id": "success_chain",
            "type": "reinforcement",
            "title": "Success -> reward chain",
            "checklist": ["Reward yourself immediately after acting"],
            "when": "Right after the activity",
            "trigger_if_then": "If you finish, then give yourself the reward",
            "est_minutes": 1,
            "required": True,
        },
    ],
    "rules_trace": ["PSSM low -> tiny task and reinforcement required"],
}

FRAGMENT_PROS_BOOST = {
    "weekly_plan_cards": [
        {
            "id": "pros_boost_card",
            "type": "pros_list",
            "title": "Grow your pros",
            "checklist": ["Add two benefits for daily life", "Link them to something already in your diary"],
            "when": "Before bed",
            "trigger_if_then": "If it is bedtime, then add to your pros",
            "est_minutes": 3,
            "required": True,
        },
    ],
    "motivation_hints": {
        "pros": ["Lighter mood in the morning", "Faster switching between tasks"],
        "reframing": [],
    },
    "rules_trace": ["PDSM unfavourable -> pros boost card inserted"],
}

FRAGMENT_SMA_PLANNING = {
    "weekly_plan_cards": [
        {
            "id": "plan_basics",
            "type": "stimulus_control",
            "title": "Planning basics",
            "checklist": ["One fixed trigger", "Put it in the calendar", "Place a physical cue"],
            "when": "Day before the first session",
            "trigger_if_then": "If it is 20:00 the day before, then get everything ready",
            "est_minutes": 5,
            "required": True,
        },
    ],
    "rules_trace": ["SMA planning gap -> planning basics card"],
}

FRAGMENT_SMA_REFRAMING = {
    "weekly_plan_cards": [
        {
            "id": "reframe_add",
            "type": "reframing_practice",
            "title": "One reframe",
            "checklist": ["Separate fact and interpretation in one line"],
            "when": "After work",
            "trigger_if_then": "If you catch yourself sighing, then write a one-line reframe",
            "est_minutes": 2,
            "required": True,
        },
    ],
    "motivation_hints": {
        "pros": [],
        "reframing": ["Facts first, interpretation second"],
    },
    "rules_trace": ["SMA reframing gap -> reframing practice added"],
}

FRAGMENT_SMA_HEALTHY = {
    "weekly_plan_cards": [
        {
            "id": "healthy_micro",
            "type": "healthy_activity",
            "title": "Healthy micro-activity",
            "checklist": ["One minute of walking or 30 seconds of stretching"],
            "when": "After dinner",
            "trigger_if_then": "If dinner is over, then move for 30-60 seconds",
            "est_minutes": 1,
            "required": True,
        },
    ],
    "rules_trace": ["SMA healthy activity gap -> micro-activity added"],
}

SMA_FOCUS_FRAGMENTS = {
    "planning": FRAGMENT_SMA_PLANNING,
    "reframing": FRAGMENT_SMA_REFRAMING,
    "healthy_activity": FRAGMENT_SMA_HEALTHY,
}
