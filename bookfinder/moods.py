"""
Static mood to genre mapping used for mood-based recommendations.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

MOOD_GENRES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    # Positive and uplifting moods
    "happy": ("Comedy", "Light Fiction", "Feel-Good Fiction", "Romantic Comedy", "Uplifting"),
    "hopeful": ("Inspirational Fiction", "Self-help", "Uplifting Non-Fiction", "Motivational", "Spiritual"),

    # Introspection and reflection
    "reflective": ("Biography", "Memoir", "Literary Fiction", "Philosophical", "Non-fiction"),
    "nostalgic": ("Historical Fiction", "Classic Literature", "Vintage Fiction", "Memoir"),

    # Excitement and adventure
    "adventurous": ("Adventure", "Action", "Thriller", "Fantasy", "Historical Adventure", "Science Fiction"),
    "energetic": ("Adventure", "Action", "Sports Fiction", "Science Fiction", "Fast-Paced Fiction"),

    # Feeling down or in need of comfort
    "sad": ("Drama", "Inspirational", "Self-help", "Psychological Fiction", "Tragic Drama"),
    "melancholic": ("Literary Fiction", "Tragic Drama", "Melodrama", "Poignant Fiction"),

    # Anger or defiance
    "angry": ("Political Thriller", "Satire", "Revenge Fiction", "Dark Fiction", "Contemporary Drama"),

    # Mystery and suspense
    "anxious": ("Mystery", "Psychological Thriller", "Suspense", "Crime Fiction", "Noir"),

    # Emotional connection
    "romantic": ("Romance", "Romantic Drama", "Contemporary Romance", "Historical Romance"),

    # Biting humor
    "frustrated": ("Satire", "Dark Comedy", "Drama", "Political Satire"),
})
