"""
Pytest fixtures for specification generator tests.
"""

import pytest
from unittest.mock import AsyncMock

from spec_generator.config.settings import PollingPolicy, PollingSettings, TemplateConfig
from spec_generator.models.project import Epic
from spec_generator.services.assistant_client import AssistantClient


STORY_SECTIONS_FR = """Voici les User Stories pour l'EPIC demandé.

##### User Story 1
**En tant que** employé, **je veux** poser une demande de congé en ligne, **afin de** ne plus remplir de formulaire papier.

**Critères d'acceptance :**
- Étant donné que je suis connecté, Quand je soumets une demande, Alors elle apparaît dans mon historique.
- Étant donné une demande en attente, Quand mon manager la valide, Alors je reçois une notification.
- Étant donné un solde insuffisant, Quand je soumets une demande, Alors un message d'erreur s'affiche.

**KPIs définis :** 80% des demandes faites en ligne
**Lien vers la maquette :** https://figma.com/file/conges

##### User Story 2
**En tant que** manager, **je veux** voir les demandes de mon équipe, **afin de** planifier les absences.

**Critères d'acceptance :**
- Étant donné que j'ai une équipe, Quand j'ouvre le tableau de bord, Alors je vois les demandes en attente.

**KPIs définis :** Délai moyen de validation inférieur à 48h
**Lien vers la maquette :** https://figma.com/file/equipe
"""

STORY_SECTIONS_EN = """##### User Story 1
As a worker, I want to clock in from my phone, so that my hours are recorded.

Acceptance Criteria:
Given I am on the home screen, When I tap clock in, Then my shift starts.
Given my shift has started, When I tap clock out, Then my hours are saved.

KPIs: 90% of shifts recorded on mobile
Design Link: https://example.com/clock
"""

NUMBERED_STORIES_FR = """Voici les stories :

1. En tant qu'employé, je veux consulter mon solde, afin de planifier mes congés.
2. En tant que manager, je veux exporter les absences, afin de préparer la paie.
"""

EPIC_SECTIONS_FR = """Voici les EPICs proposés pour le projet.

### EPIC 1 : Gestion des congés
**Titre :** Gestion des congés
**Objectif :** Permettre aux employés de poser leurs congés en ligne
**Problématique adressée :** Les demandes papier se perdent
**Valeur métier :** Réduction du temps de traitement RH

### EPIC 2 : Suivi des absences
**Objectif :** Donner aux managers une vue des absences de l'équipe
**Problématique adressée :** Aucune visibilité sur les absences
**Valeur métier :** Meilleure planification
"""

NUMBERED_EPICS_FR = """1. EPIC : Gestion des congés
2. EPIC : Suivi des absences
3. EPIC : Notes de frais
"""

STORIES_JSON = """Voici le résultat :

```json
{"stories": [{"story": "As a worker, I want X, so that Y", "acceptanceCriteria": [], "kpis": "", "designLink": ""}]}
```
"""


@pytest.fixture
def story_sections_fr() -> str:
    return STORY_SECTIONS_FR


@pytest.fixture
def story_sections_en() -> str:
    return STORY_SECTIONS_EN


@pytest.fixture
def numbered_stories_fr() -> str:
    return NUMBERED_STORIES_FR


@pytest.fixture
def epic_sections_fr() -> str:
    return EPIC_SECTIONS_FR


@pytest.fixture
def numbered_epics_fr() -> str:
    return NUMBERED_EPICS_FR


@pytest.fixture
def stories_json() -> str:
    return STORIES_JSON


@pytest.fixture
def mock_client() -> AsyncMock:
    """Create a mock generation service client."""
    client = AsyncMock(spec=AssistantClient)
    client.create_session.return_value = "thread_1"
    client.post_message.return_value = None
    client.start_job.return_value = "run_1"
    return client


@pytest.fixture
def templates() -> TemplateConfig:
    """Template ids for both job kinds."""
    return TemplateConfig(epics_template_id="asst_epics", stories_template_id="asst_stories")


@pytest.fixture
def fast_policy() -> PollingPolicy:
    """A small polling budget."""
    return PollingPolicy(interval=0.5, max_attempts=3, fetch_retries=3, retry_delay=1.0)


@pytest.fixture
def polling_settings() -> PollingSettings:
    """Polling budgets with small limits for both job kinds."""
    return PollingSettings(
        epics_interval=0.1,
        epics_max_attempts=5,
        stories_interval=0.1,
        stories_max_attempts=5,
        fetch_retries=3,
        retry_delay=0.1,
    )


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Sleep replacement that returns immediately and records its calls."""
    return AsyncMock(return_value=None)


@pytest.fixture
def sample_epic() -> Epic:
    """Create a sample epic."""
    return Epic(
        title="Gestion des congés",
        objective="Permettre aux employés de poser leurs congés en ligne",
    )
