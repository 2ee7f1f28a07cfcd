# src/content_generation/providers/prompts.py
"""
Prompt builders shared by the AI-backed providers. Both ask for a single
JSON object so one parser handles every backend.
"""

from src.content_generation.schemas.highlights import HighlightRequest
from src.content_generation.schemas.social import SocialContentRequest, SocialPlatform

HIGHLIGHT_SYSTEM_PROMPT = (
    "You are an expert business analyst who extracts key highlights from company news "
    "articles. You provide structured, actionable insights that professionals can use for "
    "decision-making and social media sharing."
)

SOCIAL_SYSTEM_PROMPT = (
    "You are a social media content expert who creates engaging, platform-specific posts "
    "from business news highlights. You understand each platform's audience, character "
    "limits, and best practices for engagement."
)

PLATFORM_GUIDELINES = {
    SocialPlatform.LINKEDIN: ("Professional, business-focused, include industry insights", "3-5 business/industry hashtags"),
    SocialPlatform.TWITTER: ("Concise, engaging, news-worthy angle", "2-3 trending/relevant hashtags"),
    SocialPlatform.FACEBOOK: ("Conversational, community-focused, discussion starter", "2-4 broad appeal hashtags"),
    SocialPlatform.INSTAGRAM: ("Visual storytelling, behind-the-scenes angle", "3-5 visual/lifestyle hashtags"),
}


def build_highlight_prompt(request: HighlightRequest) -> str:
    return f"""Extract up to {request.max_highlights} key highlights from this news article about {request.company_name}.

Article Title: {request.title}
Source: {request.source_name}
Content: {request.content}

For each highlight, provide:
1. The key insight (1-2 sentences)
2. Importance level (1-5, where 5 is most important)
3. Category (financial, operational, strategic, market, or general)

Format your response as JSON:
{{
  "highlights": [
    {{"text": "Key insight here", "importance": 4, "category": "financial"}}
  ]
}}

Prioritize concrete facts, numbers, and actionable insights over general statements."""


def build_social_prompt(request: SocialContentRequest) -> str:
    highlights_text = "\n".join(
        f"- {h.text} ({h.category.value}, importance: {h.importance})" for h in request.highlights
    )
    platform_details = "\n".join(
        f"* {p.value.upper()}: {p.max_length} chars max - {PLATFORM_GUIDELINES[p][0]} - {PLATFORM_GUIDELINES[p][1]}"
        for p in request.platforms
    )
    platforms_text = ", ".join(p.value for p in request.platforms)

    return f"""Create one social media post per platform for {platforms_text} based on these news highlights about {request.company_name}:

{highlights_text}

Platform-specific requirements:
{platform_details}

General requirements:
- Tone: {request.tone.value}
- STRICTLY follow character limits (including hashtags)
- Include the company name naturally in the content
- Add engaging hooks and calls-to-action when appropriate

Format as JSON:
{{
  "posts": [
    {{"platform": "linkedin", "content": "Post content without hashtags", "hashtags": ["#CompanyName", "#BusinessNews"]}}
  ]
}}"""
