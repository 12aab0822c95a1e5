from __future__ import annotations

GENRES: tuple[str, ...] = (
    "fantasy",
    "adventure",
    "mystery",
    "romance",
    "sci-fi",
    "horror",
    "comedy",
    "drama",
    "thriller",
)

TARGET_WORDS: dict[str, int] = {
    "short": 800,
    "medium": 1800,
    "long": 3500,
    "very-long": 5500,
}

STYLES: tuple[str, ...] = (
    "children-book",
    "storybook",
    "watercolor",
    "cartoon",
    "realistic",
)

DEFAULT_GENRE = "fantasy"
DEFAULT_LENGTH = "medium"
DEFAULT_STYLE = "children-book"


def normalize_genre(genre: str | None) -> str:
    value = (genre or "").strip().lower()
    return value if value in GENRES else DEFAULT_GENRE


def normalize_length(length: str | None) -> str:
    value = (length or "").strip().lower().replace(" ", "-").replace("_", "-")
    return value if value in TARGET_WORDS else DEFAULT_LENGTH


def normalize_style(style: str | None) -> str:
    value = (style or "").strip().lower().replace(" ", "-").replace("_", "-")
    return value if value in STYLES else DEFAULT_STYLE


GENRE_ELEMENTS: dict[str, dict[str, str]] = {
    "fantasy": {
        "setting": "in a mystical realm where magic flows through ancient forests and forgotten kingdoms",
        "conflict": "an ancient prophecy unfolded, revealing a chosen one who had to restore balance to the magical world",
        "resolution": "through courage and wisdom, the hero learned that true magic comes from within",
    },
    "adventure": {
        "setting": "in a vast wilderness where every step brought new discoveries",
        "conflict": "unexpected challenges tested the limits of courage and determination",
        "resolution": "perseverance and teamwork led to an extraordinary discovery",
    },
    "mystery": {
        "setting": "in a town where secrets lurked beneath the surface",
        "conflict": "every clue pointed to a truth more complex than anyone had imagined",
        "resolution": "careful investigation revealed that understanding comes from seeing beyond appearances",
    },
    "romance": {
        "setting": "in circumstances where hearts collided in unexpected ways",
        "conflict": "misunderstandings and distance tested the strength of their feelings",
        "resolution": "love conquered every obstacle once two souls chose to understand each other",
    },
    "sci-fi": {
        "setting": "in a future where technology and humanity intersected in profound ways",
        "conflict": "new advances in science raised questions about what it means to be human",
        "resolution": "innovation served humanity because it was guided by compassion and wisdom",
    },
    "horror": {
        "setting": "in shadows where ancient fears took physical form",
        "conflict": "even the bravest had to confront what they feared most",
        "resolution": "courage and unity triumphed over the darkness",
    },
    "comedy": {
        "setting": "in everyday situations where life took delightfully unexpected turns",
        "conflict": "mishaps and misunderstandings created wonderful comic chaos",
        "resolution": "laughter and friendship turned every obstacle into a joyful memory",
    },
    "drama": {
        "setting": "where deep challenges revealed the most profound truths",
        "conflict": "each character faced trials that tested their values and relationships",
        "resolution": "growth and understanding emerged from the struggle",
    },
    "thriller": {
        "setting": "where every moment counted and danger lurked around every corner",
        "conflict": "time ran short as the stakes grew higher",
        "resolution": "quick thinking and decisive action saved the day",
    },
}

CONFLICT_CONNECTIVES: tuple[str, ...] = (
    "Before long, {conflict}.",
    "Then, without warning, {conflict}.",
    "As the days went by, {conflict}.",
    "Soon enough, {conflict}.",
)

CONFLICT_BODY = (
    "That became the central challenge that would define the journey. "
    "The characters changed as they discovered new strengths within themselves, "
    "and the world around them seemed to respond to their growth, revealing hidden "
    "depths and quiet possibilities."
)

RESOLUTION_CONNECTIVES: tuple[str, ...] = (
    "In the end, {resolution}.",
    "Step by step, {resolution}.",
    "When the moment finally came, {resolution}.",
    "At last, {resolution}.",
)

RESOLUTION_BODY = (
    "Lessons were learned that would echo through time, and bonds were forged that "
    "would last beyond the final page. The adventure had changed everyone involved, "
    "teaching them that the greatest discoveries come from within."
)

FILLER_PARAGRAPHS: tuple[str, ...] = (
    "The journey continued with new wonders and challenges. Each step forward revealed "
    "more about the remarkable nature of their world and the hope that dwelt within every "
    "heart. The story grew richer with every chapter, weaving together courage, kindness, "
    "and the endless possibilities that wait for anyone brave enough to dream.",
    "Morning light spilled across the path as the friends gathered their thoughts. They "
    "talked about everything they had seen so far, laughing at small mistakes and "
    "remembering the moments that had frightened them, and they agreed that none of it "
    "would have been possible alone.",
    "Night settled gently over the land, and the stars came out one by one. Around a small "
    "warm fire, stories were shared and promises were made, and even the quietest among "
    "them found the courage to speak about the hopes they carried for tomorrow.",
    "Along the way they met travelers with stories of their own. Some offered advice, "
    "some offered help, and a few offered only a knowing smile, but every meeting left a "
    "small mark that would matter more than anyone could guess at the time.",
)

OPENING_TEMPLATE = (
    "Once upon a time, in a world not far from our own, a story about {prompt} unfolded "
    "{setting}. This tale begins with great promise and adventure waiting to unfold."
)

CLOSING_PARAGRAPH = (
    "And so the tale came to a gentle close, though its echoes would be carried for a "
    "long time by everyone who had been part of it."
)

GENRE_ENHANCEMENTS: dict[str, str] = {
    "fantasy": "Set in a magical world where ancient magic meets modern wonder, featuring mystical creatures, enchanted locations, and a young hero discovering their magical heritage while facing an epic quest to save both the magical and mundane realms.",
    "adventure": "An epic journey through uncharted territories where courage, friendship, and determination are tested. The protagonist faces physical and emotional challenges while discovering hidden strengths and forming unbreakable bonds with companions on a quest that will change their world forever.",
    "mystery": "A puzzling tale where every clue leads to deeper secrets. The investigator must use wit, observation, and intuition to unravel a complex mystery that challenges their assumptions and reveals unexpected truths about both the case and themselves.",
    "romance": "A heartwarming love story where two souls find each other despite seemingly impossible circumstances. Their journey involves overcoming misunderstandings, personal growth, and learning that true love means accepting each other's flaws and supporting each other's dreams.",
    "sci-fi": "Set in a future where advanced technology and human nature collide. The story explores themes of artificial intelligence, space exploration, genetic engineering, or time travel while questioning what it means to be human in an increasingly digital world.",
    "horror": "A spine-chilling tale that builds tension through atmosphere and psychological elements. The protagonist faces their deepest fears while uncovering ancient secrets that threaten not just their sanity, but the very fabric of reality itself.",
    "comedy": "A light-hearted adventure filled with humorous situations, misunderstandings, and comedic mishaps. The story finds humor in everyday life while celebrating the joy of friendship, the importance of staying positive, and the laughter that comes from life's unexpected moments.",
    "drama": "An emotionally powerful story that explores deep themes of family, friendship, loss, and personal growth. Characters face real challenges that test their values and relationships while discovering the strength that comes from vulnerability and human connection.",
    "thriller": "A pulse-pounding adventure where every second counts and danger lurks around every corner. The protagonist must use quick thinking and resourcefulness to stay ahead of threats while uncovering a conspiracy that threatens everything they hold dear.",
}

ENHANCEMENT_ELEMENTS = (
    "Additional story elements: Include rich character development with dialogue that "
    "reveals personality, vivid environmental descriptions that set the mood, unexpected "
    "plot twists that keep readers engaged, meaningful themes that resonate across age "
    "groups, and a satisfying resolution that ties together all story threads while "
    "leaving readers feeling inspired."
)

TITLE_ADJECTIVES: dict[str, tuple[str, ...]] = {
    "fantasy": ("Enchanted", "Mystical", "Magical", "Legendary", "Ancient", "Secret", "Hidden"),
    "adventure": ("Epic", "Incredible", "Thrilling", "Daring", "Brave", "Bold", "Fearless"),
    "mystery": ("Secret", "Hidden", "Mysterious", "Puzzling", "Intriguing", "Strange", "Unknown"),
    "romance": ("Love", "Heart", "Passionate", "Sweet", "Tender", "Beautiful", "Romantic"),
    "sci-fi": ("Future", "Cosmic", "Digital", "Cyber", "Stellar", "Galactic", "Advanced"),
    "horror": ("Dark", "Shadow", "Nightmare", "Haunted", "Twisted", "Creepy", "Eerie"),
    "comedy": ("Funny", "Hilarious", "Silly", "Amusing", "Playful", "Cheerful", "Joyful"),
    "drama": ("Deep", "Emotional", "Powerful", "Touching", "Moving", "Profound", "Intense"),
    "thriller": ("Dangerous", "Edge", "Suspenseful", "Tense", "Thrilling", "Urgent", "Critical"),
}

TITLE_SUBJECTS: tuple[str, ...] = (
    "Journey",
    "Quest",
    "Story",
    "Tale",
    "Adventure",
    "Experience",
    "Legend",
    "Mystery",
)

PLACEHOLDER_PALETTE: tuple[str, ...] = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEAA7",
    "#DDA0DD",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E9",
)

STYLE_PROMPTS: dict[str, str] = {
    "children-book": "colorful children's book illustration, bright colors, friendly characters, whimsical style",
    "storybook": "detailed storybook illustration, rich colors, magical atmosphere",
    "watercolor": "soft watercolor painting, gentle brushstrokes, artistic style",
    "cartoon": "cartoon style, vibrant colors, expressive characters",
    "realistic": "realistic illustration, detailed, professional quality",
}

STYLE_AGE_GROUPS: dict[str, str] = {
    "children-book": "3-8 years",
    "storybook": "6-12 years",
    "watercolor": "4-10 years",
    "cartoon": "3-12 years",
    "realistic": "8+ years",
}
