# clinic_api/common/llm/llm_service.py
"""
Chat responder used by the patient chatbot.

No model is called: replies are drawn from a fixed set of general
health-guidance messages that always point the patient back to a clinician.
"""

import random
from typing import Optional, Sequence


CANNED_RESPONSES = (
    "I understand your concern. Based on your symptoms, I recommend consulting with a healthcare professional for proper diagnosis and treatment.",
    "Thank you for your question. While I can provide general information, it's important to discuss your specific situation with your doctor.",
    "Your symptoms could be related to various conditions. I suggest scheduling an appointment with your healthcare provider for a thorough evaluation.",
    "This is a common concern. However, for accurate diagnosis and treatment recommendations, please consult with a medical professional.",
    "I appreciate you sharing this information. For personalized medical advice, it's best to speak directly with your doctor or healthcare team.",
)

FALLBACK_RESPONSE = (
    "I'm sorry, I'm having trouble processing your request right now. "
    "Please try again later or contact your healthcare provider directly."
)


class LLMService:
    """Returns a canned reply for a patient question."""

    def __init__(self, responses: Sequence[str] = CANNED_RESPONSES, rng: Optional[random.Random] = None):
        if not responses:
            raise ValueError("At least one canned response is required")
        self.responses = tuple(responses)
        self.rng = rng or random.Random()

    async def chat(self, user_message: str) -> str:
        """
        Answer a patient question.

        Args:
            user_message: The patient's question

        Returns:
            The assistant's response text
        """
        return self.rng.choice(self.responses)


# Convenience function for simple generation
async def generate_response(user_message: str) -> str:
    service = LLMService()
    return await service.chat(user_message)
