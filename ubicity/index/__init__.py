from .experience_index import ExperienceIndex
