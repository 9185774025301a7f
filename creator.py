"""Client side creation workflow.

PokemonCreator holds the form (name, description, animal type and ability
pickers), submits it to the backend one request at a time and keeps the
generated creatures in an in-memory gallery, newest first. UI concerns are
reduced to callbacks: ``notify`` shows a transient message and
``on_gallery_updated`` brings the gallery into view.
"""

import logging
import os
import re
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from errors import ApiError, NetworkError
from pokemon import ABILITIES, ANIMAL_TYPES

logger = logging.getLogger(__name__)

MESSAGES = {
    'nameRequired': 'Please enter a name for your Pokémon',
    'nameTooLong': 'Name must be at most {max} characters',
    'descriptionTooLong': 'Description must be at most {max} characters',
    'selectAnimalType': 'Please select at least one animal type',
    'selectAbility': 'Please select at least one ability',
    'maxAnimals': 'You can select up to {max} animal types',
    'maxAbilities': 'You can select up to {max} abilities',
    'created': '{name} has been created!',
    'generationFailed': 'Failed to generate Pokémon. Please try again.',
    'downloaded': '{name} downloaded!',
    'downloadFailed': 'Failed to download image',
    'linkCopied': 'Image link copied to clipboard',
    'copyFailed': 'Failed to copy link',
    'logoutFailed': 'Logout failed. Please try again.',
}


def _message(key, **kwargs):
    return MESSAGES[key].format(**kwargs)


class GenerationState(Enum):
    IDLE = 'idle'
    SUBMITTING = 'submitting'


class SelectionPicker:
    """Multi-select with a cap on the number of active choices."""

    def __init__(self, options, max_selections, over_limit_message, notify):
        self.options = list(options)
        self.max_selections = max_selections
        self._over_limit_message = over_limit_message
        self._notify = notify
        self._selected = []

    @property
    def selected(self):
        return list(self._selected)

    def _check_option(self, option):
        if option not in self.options:
            raise ValueError(f'Unknown option: {option!r}')

    def _warn(self):
        self._notify(self._over_limit_message.format(max=self.max_selections))

    def select(self, option):
        """Add option to the selection. Returns False when the cap rejects it."""
        self._check_option(option)
        if option in self._selected:
            return True
        if len(self._selected) >= self.max_selections:
            self._warn()
            return False
        self._selected.append(option)
        return True

    def deselect(self, option):
        if option in self._selected:
            self._selected.remove(option)

    def set_selection(self, options):
        """Replace the whole selection, as a multi-select change event does.

        Choices beyond the cap are dropped (the most recent ones) with a warning.
        """
        chosen = []
        for option in options:
            self._check_option(option)
            if option not in chosen:
                chosen.append(option)
        if len(chosen) > self.max_selections:
            self._warn()
            chosen = chosen[:self.max_selections]
        self._selected = chosen
        return self.selected

    def clear(self):
        self._selected = []


@dataclass
class GalleryEntry:
    id: str
    name: str
    animal_types: list
    abilities: list
    image_url: str | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_complete(self):
        return bool(self.image_url)

    @property
    def filename(self):
        slug = re.sub(r'\s+', '-', self.name.strip().lower())
        slug = re.sub(r'[^a-z0-9-]', '', slug).strip('-')
        return (slug or 'pokemon') + '.png'


class PokemonCreator:
    def __init__(self, api, notify=None, on_gallery_updated=None, copy_to_clipboard=None,
                 max_animal_types=2, max_abilities=3, name_max_length=20, description_max_length=200,
                 animal_types=ANIMAL_TYPES, abilities=ABILITIES):
        self.api = api
        self._notify = notify or (lambda message: logger.info('%s', message))
        self._on_gallery_updated = on_gallery_updated
        self._copy_to_clipboard = copy_to_clipboard
        self.name_max_length = name_max_length
        self.description_max_length = description_max_length

        self.name = ''
        self.description = ''
        self.animal_picker = SelectionPicker(animal_types, max_animal_types, MESSAGES['maxAnimals'], self.notify)
        self.ability_picker = SelectionPicker(abilities, max_abilities, MESSAGES['maxAbilities'], self.notify)

        self._entries = []
        self._state = GenerationState.IDLE
        self._flight = threading.Lock()

    def notify(self, message):
        self._notify(message)

    # --- state ---

    @property
    def state(self):
        return self._state

    @property
    def is_generating(self):
        return self._state is GenerationState.SUBMITTING

    @property
    def submit_enabled(self):
        return not self.is_generating

    @property
    def gallery(self):
        """Completed entries, most recent first."""
        return [entry for entry in self._entries if entry.is_complete]

    def check_session(self):
        return self.api.is_authenticated()

    # --- generation ---

    def _validate(self, name, description):
        if not name:
            return _message('nameRequired')
        if len(name) > self.name_max_length:
            return _message('nameTooLong', max=self.name_max_length)
        if len(description) > self.description_max_length:
            return _message('descriptionTooLong', max=self.description_max_length)
        if not self.animal_picker.selected:
            return _message('selectAnimalType')
        if not self.ability_picker.selected:
            return _message('selectAbility')
        return None

    def generate(self):
        """Submit the form. Returns the new GalleryEntry, or None.

        A call made while a submission is in flight does nothing.
        """
        if not self._flight.acquire(blocking=False):
            return None
        try:
            name = (self.name or '').strip()
            description = (self.description or '').strip()
            error = self._validate(name, description)
            if error:
                self.notify(error)
                return None

            self._state = GenerationState.SUBMITTING
            entry = GalleryEntry(
                id=str(int(time.time() * 1000)),
                name=name,
                animal_types=self.animal_picker.selected,
                abilities=self.ability_picker.selected,
            )
            try:
                data = self.api.generate_pokemon(
                    entry.name,
                    entry.animal_types,
                    entry.abilities,
                    description=description or None,
                )
            except (NetworkError, ApiError) as e:
                logger.error('Error generating Pokemon: %s', e)
                self.notify(_message('generationFailed'))
                return None

            entry.image_url = data.get('imageUrl') if isinstance(data, dict) else None
            if not entry.is_complete:
                logger.error('Generation response for %s has no image', name)
                self.notify(_message('generationFailed'))
                return None

            self._entries.insert(0, entry)
            self.reset_form()
            self.notify(_message('created', name=name))
            if self._on_gallery_updated:
                self._on_gallery_updated(self.gallery)
            return entry
        finally:
            self._state = GenerationState.IDLE
            self._flight.release()

    def reset_form(self):
        self.name = ''
        self.description = ''
        self.animal_picker.clear()
        self.ability_picker.clear()

    # --- gallery actions ---

    def download(self, entry, directory='.'):
        """Save the entry's image as <name>.png in directory. Returns the path or None."""
        if not entry.is_complete:
            return None
        try:
            content = self.api.fetch_image(entry.image_url)
            path = os.path.join(directory, entry.filename)
            with open(path, 'wb') as f:
                f.write(content)
        except (NetworkError, ApiError, ValueError, OSError) as e:
            logger.error('Error downloading image: %s', e)
            self.notify(_message('downloadFailed'))
            return None
        self.notify(_message('downloaded', name=entry.name))
        return path

    def copy_link(self, entry):
        if not entry.is_complete:
            return False
        if self._copy_to_clipboard is None:
            self.notify(_message('copyFailed'))
            return False
        # Clipboard callables signal failure with RuntimeError (pyperclip) or
        # OSError when the helper binary is missing
        try:
            self._copy_to_clipboard(entry.image_url)
        except (OSError, RuntimeError) as e:
            logger.error('Error copying to clipboard: %s', e)
            self.notify(_message('copyFailed'))
            return False
        self.notify(_message('linkCopied'))
        return True

    def logout(self):
        try:
            ok = self.api.logout()
        except NetworkError as e:
            logger.error('Logout error: %s', e)
            ok = False
        if not ok:
            self.notify(_message('logoutFailed'))
        return ok
