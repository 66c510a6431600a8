# services/enhancer.py
import logging
from openai import OpenAI
from config.settings import get_enhancer_config

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are an expert in medical sales. Your specialty is medical consumables used by hospitals on a daily basis. Your task is to enhance the description of a product based on the information provided.

Product name: {name}
Product description: {description}

New Description:
"""

class DescriptionEnhancer:
    """Pass-through enhancer used when no text-generation backend is configured"""

    def enhance(self, name, description):
        """
        Args:
            name (str): Product name
            description (str): Current, possibly empty, description

        Returns:
            str: Enhanced description, or the original one on any failure
        """
        try:
            return self._generate(name, description)
        except Exception as e:
            logger.error(f"Error enhancing description for '{name}': {str(e)}")
            return description

    def _generate(self, name, description):
        return description

class OpenAIDescriptionEnhancer(DescriptionEnhancer):
    """Rewrites product descriptions with the OpenAI chat completions API"""

    def __init__(self, client, model, max_tokens=150, temperature=0.7):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _generate(self, name, description):
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "user", "content": PROMPT_TEMPLATE.format(name=name, description=description)},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        content = (response.choices[0].message.content or '').strip()
        if not content:
            logger.warning(f"Empty enhancement returned for '{name}', keeping original description")
            return description
        return content

def get_description_enhancer(config=None):
    """
    Build the enhancer for this run

    Falls back to pass-through when enhancement is disabled or no API key
    is configured.
    """
    config = config or get_enhancer_config()
    if not config['enabled']:
        return DescriptionEnhancer()

    if not config['api_key']:
        logger.warning("ENHANCE_DESCRIPTIONS is set but OPENAI_API_KEY is missing; descriptions are passed through")
        return DescriptionEnhancer()

    logger.info(f"Description enhancement enabled with model {config['model']}")
    return OpenAIDescriptionEnhancer(
        OpenAI(api_key=config['api_key']),
        config['model'],
        max_tokens=config['max_tokens'],
        temperature=config['temperature'],
    )
