"""User-message templates sent to the generation templates.

The templates themselves (assistant instructions) live on the service side;
these messages only carry the project and epic context.
"""

EPICS_PROMPT = """Projet : {project_title}

Description détaillée : {project_description}

Merci de générer les EPICs pour ce projet selon le format spécifié dans tes instructions."""

STORIES_PROMPT = """Projet : {project_title}

EPIC : {epic_title}

Objectif de l'EPIC : {epic_objective}

Merci de générer les User Stories pour cet EPIC selon le format spécifié dans tes instructions."""


def build_epics_prompt(project_title: str, project_description: str) -> str:
    return EPICS_PROMPT.format(
        project_title=project_title,
        project_description=project_description,
    )


def build_stories_prompt(project_title: str, epic_title: str, epic_objective: str) -> str:
    return STORIES_PROMPT.format(
        project_title=project_title,
        epic_title=epic_title,
        epic_objective=epic_objective,
    )
