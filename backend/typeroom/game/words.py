from __future__ import annotations

import random


DEFAULT_WORDS_EN = [
    "about", "above", "across", "act", "add", "after", "again", "against", "age", "ago",
    "air", "all", "almost", "alone", "along", "always", "among", "animal", "answer", "any",
    "appear", "area", "arm", "around", "art", "ask", "back", "bad", "ball", "bank",
    "base", "bear", "beat", "become", "bed", "before", "begin", "behind", "believe", "best",
    "better", "between", "big", "bird", "black", "blue", "boat", "body", "book", "both",
    "bottom", "box", "boy", "bring", "brother", "build", "burn", "busy", "buy", "call",
    "came", "can", "car", "care", "carry", "case", "cat", "catch", "cause", "center",
    "change", "check", "child", "city", "class", "clean", "clear", "close", "cold", "color",
    "come", "common", "complete", "could", "country", "course", "cover", "cross", "cut", "dark",
    "day", "deep", "develop", "did", "different", "direct", "do", "door", "down", "draw",
    "dream", "drive", "dry", "during", "each", "early", "earth", "east", "eat", "end",
    "enough", "even", "ever", "every", "eye", "face", "fact", "fall", "family", "far",
    "farm", "fast", "father", "feel", "few", "field", "figure", "fill", "final", "find",
    "fire", "first", "fish", "five", "fly", "follow", "food", "foot", "force", "form",
    "found", "four", "free", "friend", "front", "full", "game", "garden", "gave", "general",
    "get", "girl", "give", "glass", "go", "gold", "good", "great", "green", "ground",
    "group", "grow", "half", "hand", "happen", "hard", "have", "head", "hear", "heart",
    "heat", "heavy", "help", "here", "high", "hill", "hold", "home", "horse", "hot",
    "hour", "house", "however", "hundred", "idea", "important", "inch", "interest", "island", "just",
    "keep", "kind", "king", "know", "land", "language", "large", "last", "late", "later",
    "laugh", "lead", "learn", "leave", "left", "less", "letter", "life", "light", "line",
    "list", "listen", "little", "live", "long", "look", "lost", "love", "low", "machine",
    "made", "main", "make", "man", "many", "map", "mark", "may", "mean", "measure",
    "might", "mile", "mind", "minute", "miss", "money", "moon", "more", "morning", "most",
    "mother", "mountain", "move", "much", "music", "must", "name", "near", "need", "never",
    "new", "next", "night", "north", "note", "nothing", "notice", "now", "number", "object",
    "ocean", "off", "often", "old", "once", "only", "open", "order", "other", "over",
    "own", "page", "paper", "part", "pass", "people", "perhaps", "person", "picture", "piece",
    "place", "plain", "plan", "plant", "play", "point", "power", "press", "problem", "produce",
    "public", "pull", "question", "quick", "rain", "reach", "read", "ready", "real", "record",
    "red", "remember", "rest", "right", "river", "road", "rock", "room", "round", "rule",
    "run", "same", "say", "school", "science", "sea", "second", "see", "seem", "sentence",
    "serve", "set", "several", "shape", "ship", "short", "should", "show", "side", "simple",
    "since", "sing", "sit", "size", "sleep", "slow", "small", "snow", "so", "some",
    "song", "soon", "sound", "south", "space", "speak", "special", "stand", "star", "start",
    "state", "stay", "step", "still", "stop", "story", "street", "strong", "study", "such",
    "sun", "sure", "surface", "system", "table", "take", "talk", "teach", "tell", "ten",
    "test", "than", "thing", "think", "though", "thought", "three", "through", "time", "today",
    "together", "told", "too", "top", "toward", "town", "travel", "tree", "true", "try",
    "turn", "under", "unit", "until", "upon", "use", "usual", "very", "voice", "walk",
    "want", "warm", "watch", "water", "way", "weather", "week", "well", "west", "wheel",
    "while", "white", "whole", "why", "wind", "window", "winter", "wish", "with", "without",
    "wonder", "wood", "word", "work", "world", "would", "write", "year", "yes", "young",
]


def pick_words(words: list[str], count: int, rng: random.Random | None = None) -> list[str]:
    """Draw ``count`` words with replacement so any count works."""
    if count <= 0 or not words:
        return []
    r = rng or random
    return [r.choice(words) for _ in range(count)]


def generate_test_text(count: int, rng: random.Random | None = None) -> str:
    return " ".join(pick_words(DEFAULT_WORDS_EN, count, rng=rng))
