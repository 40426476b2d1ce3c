"""
Inference gateway client
========================
Chat-completions gateway used for two advisory features next to the scorer:
  - crop image analysis (disease / pest / deficiency detection)
  - government scheme analysis for a farmer profile

Configuration (environment):
    INFERENCE_GATEWAY_URL      chat-completions endpoint
    INFERENCE_GATEWAY_API_KEY  bearer token
    INFERENCE_MODEL            model name (default google/gemini-2.5-flash)

Usage:
    from agreegenius.inference_gateway import analyze_crop_image
    analysis = analyze_crop_image("data:image/jpeg;base64,...")

Errors:
    GatewayConfigError     no API key
    GatewayRateLimitError  HTTP 429
    GatewayCreditsError    HTTP 402
    GatewayError           any other failure, including connection errors,
                           timeouts and non-JSON bodies (base class of the above)
"""

import json
import logging
import re

import requests

from agreegenius import config

log = logging.getLogger(__name__)

CROP_ANALYSIS_PROMPT = """You are an expert agricultural pathologist and crop disease specialist. Analyze crop images and provide:
1. Crop identification (type, variety if possible)
2. Health status (healthy, diseased, pest damage, nutrient deficiency)
3. Specific diseases or issues detected with confidence level
4. Severity assessment (mild, moderate, severe)
5. Recommended treatments and preventive measures
6. Urgency level (immediate action, monitor, routine care)

Return a structured JSON response with these fields:
{
  "cropType": "string",
  "healthStatus": "healthy|diseased|pest_damage|nutrient_deficiency|unknown",
  "confidence": number (0-100),
  "diseases": [
    {"name": "string", "confidence": number, "severity": "mild|moderate|severe", "description": "string"}
  ],
  "treatments": ["string"],
  "preventiveMeasures": ["string"],
  "urgency": "immediate|monitor|routine",
  "additionalNotes": "string"
}"""

CROP_ANALYSIS_REQUEST = (
    "Please analyze this crop image and identify the crop type and any diseases or issues present."
)

SCHEME_ANALYSIS_PROMPT = """You are an expert agricultural policy advisor for India with deep knowledge of government schemes for farmers.
Analyze the farmer's profile and provide personalized scheme recommendations.

Return your analysis in the following JSON structure:
{
  "eligibleSchemes": [
    {
      "name": "Scheme name",
      "category": "Category (e.g., Subsidy, Insurance, Credit, Infrastructure)",
      "eligibility": "Why this farmer is eligible",
      "benefits": "Key benefits",
      "howToApply": "Application process",
      "documents": ["List of required documents"],
      "priority": "high/medium/low"
    }
  ],
  "generalAdvice": "Overall guidance for maximizing scheme benefits",
  "nextSteps": ["Action items for the farmer"]
}"""

NOT_SPECIFIED = "Not specified"

_FENCED_JSON = re.compile(r"```json\n([\s\S]*?)\n```")
_FENCED_ANY = re.compile(r"```([\s\S]*?)```")


class GatewayError(RuntimeError):
    """Inference gateway call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GatewayConfigError(GatewayError):
    pass


class GatewayRateLimitError(GatewayError):
    pass


class GatewayCreditsError(GatewayError):
    pass


def fallback_crop_analysis(raw_text: str) -> dict:
    """Analysis returned when the model's reply is not parseable JSON."""
    return {
        "cropType": "Unknown",
        "healthStatus": "unknown",
        "confidence": 0,
        "diseases": [],
        "treatments": [],
        "preventiveMeasures": [],
        "urgency": "monitor",
        "additionalNotes": raw_text,
    }


def extract_json(content: str) -> dict:
    """
    Parse JSON from a model reply, unwrapping ```json fences if present.
    Raises ValueError (json.JSONDecodeError) when no JSON can be parsed.
    """
    match = _FENCED_JSON.search(content) or _FENCED_ANY.search(content)
    payload = match.group(1) if match and match.group(1) else content
    return json.loads(payload.strip())


def _post_chat(payload: dict, api_key: str | None, session=None) -> str:
    """
    POST one chat-completions request and return the first message content.
    """
    key = api_key or config.INFERENCE_GATEWAY_API_KEY
    if not key:
        raise GatewayConfigError("INFERENCE_GATEWAY_API_KEY is not configured")

    http = session or requests
    try:
        resp = http.post(
            config.INFERENCE_GATEWAY_URL,
            headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
            json={"model": config.INFERENCE_MODEL, **payload},
            timeout=config.INFERENCE_TIMEOUT,
        )
    except requests.RequestException as exc:
        log.error("Inference gateway request failed: %s", exc)
        raise GatewayError(f"Inference gateway unreachable: {exc}") from exc

    if not resp.ok:
        log.error("Inference gateway error: %s %s", resp.status_code, resp.text)
        if resp.status_code == 429:
            raise GatewayRateLimitError("Rate limit exceeded. Please try again later.", 429)
        if resp.status_code == 402:
            raise GatewayCreditsError("AI credits depleted. Please add credits to continue.", 402)
        raise GatewayError(f"Inference gateway error: {resp.status_code}", resp.status_code)

    try:
        data = resp.json()
    except ValueError as exc:
        log.error("Inference gateway returned a non-JSON body: %s", exc)
        raise GatewayError(f"Inference gateway returned invalid JSON: {exc}", resp.status_code) from exc
    choices = data.get("choices") or [{}]
    content = (choices[0].get("message") or {}).get("content")
    if not content:
        raise GatewayError("No response from inference gateway")
    return content


def analyze_crop_image(image_data_url: str, api_key: str | None = None, session=None) -> dict:
    """
    Analyze a crop photo (data URL or https URL) for diseases, pests and deficiencies.
    Returns the parsed analysis dict; unparseable replies fall back to an
    'Unknown' analysis carrying the raw text in additionalNotes.
    """
    if not image_data_url:
        raise ValueError("image_data_url is required")

    log.info("Analyzing crop image ...")
    content = _post_chat(
        {
            "messages": [
                {"role": "system", "content": CROP_ANALYSIS_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": CROP_ANALYSIS_REQUEST},
                        {"type": "image_url", "image_url": {"url": image_data_url}},
                    ],
                },
            ],
        },
        api_key,
        session,
    )
    try:
        return extract_json(content)
    except ValueError as exc:
        log.warning("Could not parse crop analysis as JSON (%s); returning raw notes.", exc)
        return fallback_crop_analysis(content)


def build_scheme_prompt(farmer_profile: dict) -> str:
    size = farmer_profile.get("farm_size")
    return (
        "Farmer Profile:\n"
        f"- Location: {farmer_profile.get('location') or NOT_SPECIFIED}, "
        f"{farmer_profile.get('state') or NOT_SPECIFIED}\n"
        f"- Farm Size: {f'{size} acres' if size else NOT_SPECIFIED}\n"
        f"- Farm Type: {farmer_profile.get('farm_type') or NOT_SPECIFIED}\n"
        f"- Name: {farmer_profile.get('full_name') or NOT_SPECIFIED}\n\n"
        "Based on this profile, identify all relevant central and state government schemes "
        "in India that this farmer might be eligible for. Focus on practical, currently active schemes."
    )


def analyze_schemes(farmer_profile: dict, api_key: str | None = None, session=None) -> dict:
    """
    Ask the gateway which government schemes fit a farmer profile.
    Profile keys used: location, state, farm_size, farm_type, full_name.
    """
    if not farmer_profile:
        raise ValueError("Farmer profile is required")

    log.info("Analyzing schemes for farmer profile (%s).", farmer_profile.get("state") or NOT_SPECIFIED)
    content = _post_chat(
        {
            "messages": [
                {"role": "system", "content": SCHEME_ANALYSIS_PROMPT},
                {"role": "user", "content": build_scheme_prompt(farmer_profile)},
            ],
            "response_format": {"type": "json_object"},
        },
        api_key,
        session,
    )
    try:
        return extract_json(content)
    except ValueError as exc:
        raise GatewayError(f"Scheme analysis was not valid JSON: {exc}") from exc
