"""Exception types raised by the chat core."""


class PipechatError(Exception):
    """Base class for all errors raised by pipechat."""


class TokenizerUnavailableError(PipechatError):
    """The tokenizer encoding could not be loaded."""


class UnpricedModelError(PipechatError):
    """No price rates are known for the requested model."""

    def __init__(self, model: str):
        super().__init__(f"No pricing available for model '{model}'.")
        self.model = model
