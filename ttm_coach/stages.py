"""
Stage guide shown before a work chat: what the stage means, how the coach
should steer the conversation, and three suggested openers.
"""
from __future__ import annotations

from typing import Optional

from .banding import stage_name
from .dimensions import Stage

DEFAULT_STAGE = Stage.PC

CALL_TO_ACTION = "To begin, pick one of the options below that you would like to work on."

STAGE_DETAILS = {
    Stage.PC: {
        "description": (
            "Your current stage is Precontemplation.\n\n"
            "Interest in changing behaviour is low or absent. Information about the benefits of acting, "
            "offered without pressure, works best here. The goal is to become interested in change."
        ),
        "coaching_strategy": (
            "The end goal of this conversation is to spark interest in change and prepare the user "
            "to move on to Contemplation."
        ),
        "choices": [
            "I want to sort out the stress signals I notice in my life right now",
            "I want to know more about what happens if stress is left alone",
            "I want to think through the benefits of starting stress care",
        ],
    },
    Stage.C: {
        "description": (
            "Your current stage is Contemplation.\n\n"
            "You are interested in change but torn between its pros and cons. Tipping the decisional "
            "balance towards the pros and building confidence helps most. The goal is to start preparing "
            "a concrete plan."
        ),
        "coaching_strategy": (
            "The end goal of this conversation is to resolve ambivalence and build the confidence and "
            "commitment needed to move on to Preparation."
        ),
        "choices": [
            "I want to sort out the benefits and worries of starting stress care",
            "I want to look back at coping methods I have tried before",
            "I want to brainstorm ideas I could start small with",
        ],
    },
    Stage.PR: {
        "description": (
            "Your current stage is Preparation.\n\n"
            "You intend to act soon, for example within a month. Setting small, achievable goals and "
            "deciding when, where and what to do is what matters now. The goal is to get started."
        ),
        "coaching_strategy": (
            "The end goal of this conversation is to complete a concrete, realistic plan and move "
            "smoothly into Action."
        ),
        "choices": [
            "I want to make a stress care plan I can start without strain",
            "I want advice on setting up my surroundings to keep going",
            "I want tips for fitting it into my daily schedule",
        ],
    },
    Stage.A: {
        "description": (
            "Your current stage is Action.\n\n"
            "You started less than six months ago. Slips are most likely now, so strategies that support "
            "continuation (rewards, support from others, removing obstacles) work well. The goal is to "
            "keep going until it becomes a habit."
        ),
        "coaching_strategy": (
            "The end goal of this conversation is to build the skills that turn the behaviour into a "
            "habit and support the move into Maintenance."
        ),
        "choices": [
            "I want to know how to recover when I cannot keep it up",
            "I want to think about how to use support from the people around me",
            "I want advice on reviewing my progress in a way I can feel",
        ],
    },
    Stage.M: {
        "description": (
            "Your current stage is Maintenance.\n\n"
            "You have kept the behaviour up for six months or more. The risk of relapse is lower but not "
            "gone. Ways to keep going and next steps are good topics. The goal is a settled habit and "
            "relapse prevention."
        ),
        "coaching_strategy": (
            "The end goal of this conversation is to strengthen the strategies that keep the current "
            "behaviour going and prevent relapse. New goals are fine, but maintenance comes first."
        ),
        "choices": [
            "I want to review what I have kept up and name my strengths",
            "I want to agree on checkpoints that prevent relapse",
            "I want ideas for my next goal or stepping up",
        ],
    },
}


def stage_metadata(stage: Optional[Stage | str] = None) -> dict:
    key = Stage.parse(stage) if stage else DEFAULT_STAGE
    detail = STAGE_DETAILS[key]
    return {
        "id": key.value,
        "stage_name": stage_name(key),
        "description": f"{detail['description']}\n\n{CALL_TO_ACTION}",
        "system_description": detail["description"],
        "coaching_strategy": detail["coaching_strategy"],
        "choices": list(detail["choices"]),
    }


__all__ = ["DEFAULT_STAGE", "CALL_TO_ACTION", "STAGE_DETAILS", "stage_metadata"]
