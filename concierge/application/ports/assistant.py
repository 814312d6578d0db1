from abc import ABC, abstractmethod


class AssistantPort(ABC):
    @abstractmethod
    async def reply(
        self,
        message: str,
        history: list[dict[str, str]],
        personality: str,
    ) -> str:
        """
        Produce the assistant answer for `message`.

        Requirements:
        - `history` holds prior turns as {"role", "content"} pairs, oldest first
        - Must return non-empty text

        Raises:
            NetworkFailure: transport or provider failure
            InvalidResponseShape: malformed or empty answer
            ServiceTimeout: the provider did not answer in time
        """
        raise NotImplementedError
