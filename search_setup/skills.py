"""
Enrichment skill definitions.

Every skill is built by its own factory and identified by its `name`, which is
also the identifier used to enable it through configuration. Paths refer to
the enriched document tree the indexer builds for each blob:

    /document/content                      extracted text
    /document/normalized_images/*          images cracked from the blob
    /document/normalized_images/*/text     OCR output per image
    /document/merged_text                  content with OCR text inserted
    /document/languageCode                 detected language
    /document/pages/*                      merged text split into pages
"""

from collections import OrderedDict
from typing import Callable, Dict, Iterable, List

from azure.search.documents.indexes.models import (
    EntityRecognitionSkill,
    InputFieldMappingEntry,
    KeyPhraseExtractionSkill,
    LanguageDetectionSkill,
    MergeSkill,
    OcrSkill,
    OutputFieldMappingEntry,
    SearchIndexerSkill,
    SplitSkill,
)

OCR = "ocr"
MERGE = "merge"
LANGUAGE_DETECTION = "language-detection"
SPLIT = "split"
ENTITY_RECOGNITION = "entity-recognition"
KEY_PHRASE_EXTRACTION = "key-phrase-extraction"

DEFAULT_LANGUAGE = "en"
MAXIMUM_PAGE_LENGTH = 4000


def create_ocr_skill() -> OcrSkill:
    return OcrSkill(
        name=OCR,
        description="Extract text (plain and structured) from image",
        context="/document/normalized_images/*",
        default_language_code=DEFAULT_LANGUAGE,
        should_detect_orientation=True,
        inputs=[InputFieldMappingEntry(name="image", source="/document/normalized_images/*")],
        outputs=[OutputFieldMappingEntry(name="text", target_name="text")],
    )


def create_merge_skill() -> MergeSkill:
    return MergeSkill(
        name=MERGE,
        description=(
            "Create merged_text which includes all the textual representation of each image "
            "inserted at the right location in the content field."
        ),
        context="/document",
        insert_pre_tag=" ",
        insert_post_tag=" ",
        inputs=[
            InputFieldMappingEntry(name="text", source="/document/content"),
            InputFieldMappingEntry(name="itemsToInsert", source="/document/normalized_images/*/text"),
            InputFieldMappingEntry(name="offsets", source="/document/normalized_images/*/contentOffset"),
        ],
        outputs=[OutputFieldMappingEntry(name="mergedText", target_name="merged_text")],
    )


def create_language_detection_skill() -> LanguageDetectionSkill:
    return LanguageDetectionSkill(
        name=LANGUAGE_DETECTION,
        description="Detect the language used in the document",
        context="/document",
        inputs=[InputFieldMappingEntry(name="text", source="/document/merged_text")],
        outputs=[OutputFieldMappingEntry(name="languageCode", target_name="languageCode")],
    )


def create_split_skill() -> SplitSkill:
    return SplitSkill(
        name=SPLIT,
        description="Split content into pages",
        context="/document",
        text_split_mode="pages",
        maximum_page_length=MAXIMUM_PAGE_LENGTH,
        default_language_code=DEFAULT_LANGUAGE,
        inputs=[
            InputFieldMappingEntry(name="text", source="/document/merged_text"),
            InputFieldMappingEntry(name="languageCode", source="/document/languageCode"),
        ],
        outputs=[OutputFieldMappingEntry(name="textItems", target_name="pages")],
    )


def create_entity_recognition_skill() -> EntityRecognitionSkill:
    return EntityRecognitionSkill(
        name=ENTITY_RECOGNITION,
        description="Recognize organizations",
        context="/document/pages/*",
        categories=["Organization"],
        default_language_code=DEFAULT_LANGUAGE,
        inputs=[InputFieldMappingEntry(name="text", source="/document/pages/*")],
        outputs=[OutputFieldMappingEntry(name="organizations", target_name="organizations")],
    )


def create_key_phrase_extraction_skill() -> KeyPhraseExtractionSkill:
    return KeyPhraseExtractionSkill(
        name=KEY_PHRASE_EXTRACTION,
        description="Extract the key phrases",
        context="/document/pages/*",
        default_language_code=DEFAULT_LANGUAGE,
        inputs=[
            InputFieldMappingEntry(name="text", source="/document/pages/*"),
            InputFieldMappingEntry(name="languageCode", source="/document/languageCode"),
        ],
        outputs=[OutputFieldMappingEntry(name="keyPhrases", target_name="keyPhrases")],
    )


# Canonical order of the skills inside a skillset.
SKILL_FACTORIES: Dict[str, Callable[[], SearchIndexerSkill]] = OrderedDict(
    [
        (OCR, create_ocr_skill),
        (MERGE, create_merge_skill),
        (LANGUAGE_DETECTION, create_language_detection_skill),
        (SPLIT, create_split_skill),
        (ENTITY_RECOGNITION, create_entity_recognition_skill),
        (KEY_PHRASE_EXTRACTION, create_key_phrase_extraction_skill),
    ]
)

SKILL_NAMES = tuple(SKILL_FACTORIES)

DEFAULT_ENABLED_SKILLS = (LANGUAGE_DETECTION,)


def build_skills() -> Dict[str, SearchIndexerSkill]:
    """Builds every known skill, keyed by skill name in canonical order."""
    return OrderedDict((name, factory()) for name, factory in SKILL_FACTORIES.items())


def select_skills(skills: Dict[str, SearchIndexerSkill], enabled: Iterable[str]) -> List[SearchIndexerSkill]:
    """
    Returns the enabled skills in canonical order.

    Raises:
        ValueError: if a name is unknown or nothing is enabled.
    """
    enabled = [name.strip() for name in enabled if name and name.strip()]
    unknown = sorted(set(enabled) - set(skills))
    if unknown:
        raise ValueError(f"Unknown skill(s): {', '.join(unknown)}. Known skills: {', '.join(skills)}")
    if not enabled:
        raise ValueError("At least one skill must be enabled.")
    return [skill for name, skill in skills.items() if name in enabled]
