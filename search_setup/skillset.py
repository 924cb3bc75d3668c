import logging
from typing import Iterable

from azure.search.documents.indexes import SearchIndexerClient
from azure.search.documents.indexes.models import SearchIndexerSkillset

from search_setup.results import StageResult
from search_setup.skills import DEFAULT_ENABLED_SKILLS, build_skills, select_skills
from tools.aisearch import Credential

STAGE = "SKILLSET"

########################################################
# Create skillset
########################################################


def create_skillset(
    endpoint: str,
    credential: Credential,
    skillset_name: str,
    enabled_skills: Iterable[str] = DEFAULT_ENABLED_SKILLS,
) -> StageResult:
    """
    Creates or updates the enrichment skillset.

    All skills are built, but only the enabled ones are registered.

    Args:
        endpoint: search service endpoint
        credential: admin key or token credential for the search service
        skillset_name: name (and description) of the skillset
        enabled_skills: names of the skills to include, see `search_setup.skills.SKILL_NAMES`
    """
    enabled_skills = list(enabled_skills)

    logging.info("[SKILLSET] Creating the skills...")
    try:
        skills = select_skills(build_skills(), enabled_skills)
    except ValueError as e:
        logging.error(f"[SKILLSET] Error: Invalid skill selection for '{skillset_name}'. Error: {e}")
        return StageResult.failure(STAGE, f"Invalid skill selection for '{skillset_name}': {e}", error=e)

    skillset = SearchIndexerSkillset(name=skillset_name, skills=skills, description=skillset_name)
    skill_names = [skill.name for skill in skills]

    logging.info(f"[SKILLSET] Creating or updating the SkillSet '{skillset_name}' with skills: {', '.join(skill_names)}")
    try:
        with SearchIndexerClient(endpoint, credential) as indexer_client:
            result = indexer_client.create_or_update_skillset(skillset)
    except Exception as e:
        logging.error(f"[SKILLSET] Failed to create the skillset '{skillset_name}'. Exception message: {e}")
        return StageResult.failure(STAGE, f"Cannot create skillset '{skillset_name}': {e}", error=e, resource=skillset, skills=skill_names)

    logging.info(f"[SKILLSET] SkillSet '{skillset_name}' created or updated.")
    return StageResult.success(STAGE, f"Skillset '{skillset_name}' registered with {', '.join(skill_names)}", resource=result, skills=skill_names)
