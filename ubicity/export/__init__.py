from .formats import ExperienceExporter, export_data, voyant_corpus, FORMATS
from .privacy import (
    anonymize_learner, anonymize_location, remove_pii,
    fully_anonymize, generate_shareable_dataset, pseudonym
)
