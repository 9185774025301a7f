"""Creature options, request validation and prompt building."""

from dataclasses import dataclass

from errors import InvalidRequest

ANIMAL_TYPES = [
    'Dragon', 'Cat', 'Dog', 'Bird', 'Fish', 'Snake',
    'Tiger', 'Bear', 'Wolf', 'Fox', 'Rabbit', 'Mouse',
]

ABILITIES = [
    'Fire', 'Water', 'Electric', 'Grass', 'Ice', 'Flying',
    'Psychic', 'Dark', 'Steel', 'Ghost', 'Dragon', 'Fairy',
]

PROMPT_STYLE = 'colorful, digital art, high quality, pokemon style, fantasy art'
NEGATIVE_PROMPT = 'ugly, blurry, low quality, distorted, disfigured, bad anatomy'


def _string_list(value, field, max_items):
    if not isinstance(value, (list, tuple)) or not value:
        raise InvalidRequest(f'{field} must be a non-empty list')
    if len(value) > max_items:
        raise InvalidRequest(f'{field} accepts at most {max_items} selections')
    items = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise InvalidRequest(f'{field} entries must be non-empty strings')
        items.append(item.strip())
    return items


@dataclass(frozen=True)
class GenerationRequest:
    name: str
    animal_types: tuple
    abilities: tuple
    description: str | None = None

    @classmethod
    def from_payload(cls, data, max_animal_types=2, max_abilities=3, name_max_length=20,
                     description_max_length=200):
        """Validate a /generate-pokemon JSON body.

        Raises InvalidRequest when a required field is missing or malformed.
        """
        if not isinstance(data, dict):
            raise InvalidRequest('Missing required fields')
        name = data.get('name')
        animal_types = data.get('animalTypes')
        abilities = data.get('abilities')
        if not name or not animal_types or not abilities:
            raise InvalidRequest('Missing required fields')

        if not isinstance(name, str) or not name.strip():
            raise InvalidRequest('name must be a non-empty string')
        name = name.strip()
        if len(name) > name_max_length:
            raise InvalidRequest(f'name must be at most {name_max_length} characters')

        description = data.get('description')
        if description is not None and not isinstance(description, str):
            raise InvalidRequest('description must be a string')
        description = (description or '').strip() or None
        if description and len(description) > description_max_length:
            raise InvalidRequest(f'description must be at most {description_max_length} characters')

        return cls(
            name=name,
            animal_types=tuple(_string_list(animal_types, 'animalTypes', max_animal_types)),
            abilities=tuple(_string_list(abilities, 'abilities', max_abilities)),
            description=description,
        )

    def prompt(self):
        return build_prompt(self.name, self.animal_types, self.abilities, self.description)


def build_prompt(name, animal_types, abilities, description=None):
    prompt = (
        f"A pokemon creature named {name} that combines {' and '.join(animal_types)}, "
        f"with {', '.join(abilities)} powers"
    )
    if description:
        prompt += f", {description}"
    return f"{prompt}, {PROMPT_STYLE}"
