from quiz_core import PromptChannel


class ScriptedChannel(PromptChannel):
    """
    Channel fed from a list of input lines, or from a function of the prompt
    text. Runs out of input like a closed connection.
    """

    def __init__(self, inputs=(), supports_prefill=False):
        super().__init__(prompt='> ')
        self._responder = inputs if callable(inputs) else None
        self._inputs = [] if callable(inputs) else list(inputs)
        self.supports_prefill = supports_prefill
        self.output = []
        self.requests = []
        self.prefills = []

    def _write(self, data):
        self.output.append(data)

    def _read_line(self, text, prefill):
        self.requests.append(text)
        self.prefills.append(prefill)

        if self._responder is not None:
            line = self._responder(text)
        elif self._inputs:
            line = self._inputs.pop(0)
        else:
            line = None

        return None if line is None else line + '\n'

    @property
    def text(self):
        return ''.join(self.output)

    @property
    def lines(self):
        return self.text.split('\n')
