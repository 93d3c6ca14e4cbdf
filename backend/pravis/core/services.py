from pravis.adapters.llm import LLMClient
from pravis.services.chat.service import AssistantService

# Initialize Singletons
llm = LLMClient()
assistant_service = AssistantService(llm)
