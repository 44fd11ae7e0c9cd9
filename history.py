"""
Undo/redo history for posing

Every committed edit stores a snapshot of the whole layer set. Drags in
progress are never recorded; the snapshot is taken when the gesture ends.
"""

from constants import MAX_HISTORY


def snapshot_layers(layers):
    """ Immutable copy of a layer list (layers and pins copied, images shared). """
    return tuple(layer.copy() for layer in layers)


class HistoryLog:
    """ Snapshot log with a cursor; pushing after an undo drops the redo tail. """

    def __init__(self, max_history=MAX_HISTORY):
        self.max_history = max_history
        self.entries = []
        self.index = -1

    def __len__(self):
        return len(self.entries)

    def push(self, layers, description=""):
        del self.entries[self.index + 1:]
        self.entries.append((snapshot_layers(layers), description))
        self.index += 1

        if len(self.entries) > self.max_history:
            self.entries.pop(0)
            self.index -= 1

        print("[History] State saved: %s (index: %i, total: %i)" % (
            description, self.index, len(self.entries)))

    def can_undo(self):
        return self.index > 0

    def can_redo(self):
        return self.index < len(self.entries) - 1

    def _restore(self):
        layers, description = self.entries[self.index]
        return [layer.copy() for layer in layers], description

    def undo(self):
        """ Step back; returns a fresh list of layers, or None at the start. """
        if not self.can_undo():
            return None
        self.index -= 1
        layers, description = self._restore()
        print("[History] Undo to: %s (index: %i)" % (description, self.index))
        return layers

    def redo(self):
        if not self.can_redo():
            return None
        self.index += 1
        layers, description = self._restore()
        print("[History] Redo to: %s (index: %i)" % (description, self.index))
        return layers

    def clear(self):
        self.entries = []
        self.index = -1
