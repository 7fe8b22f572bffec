"""
Assistant service for JobPortal
Career assistant backed by an OpenAI-compatible chat completion API
"""

import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI
from openai.types.chat import ChatCompletion

from jobportal.config import settings
from jobportal.models.user import UserRole

logger = logging.getLogger(__name__)

JOBSEEKER_CONTEXT = (
    "You are a professional career advisor helping a job seeker. Provide specific, actionable advice "
    "about job searching, career development, interview preparation, resume improvement, and "
    "professional growth. Be encouraging but realistic."
)
EMPLOYER_CONTEXT = (
    "You are a recruitment and HR consultant helping an employer. Provide specific, actionable advice "
    "about hiring processes, job posting optimization, candidate evaluation, team building, and talent "
    "management. Be professional and strategic."
)

CHAT_FALLBACK = (
    "I apologize, but I am unable to respond at the moment. Please check your internet connection and "
    "try again. If the problem persists, please try rephrasing your question."
)
JOB_DESCRIPTION_FALLBACK = (
    "I apologize, but I am unable to generate a job description at the moment. Please try writing one "
    "manually or try again later."
)
RECOMMENDATIONS_FALLBACK = (
    "I apologize, but I am unable to provide job recommendations at the moment. Please try again later "
    "or check your internet connection."
)
INTERVIEW_QUESTIONS_FALLBACK = "Sorry, I cannot generate interview questions right now. Please try again later."
RESUME_FALLBACK = "Sorry, I cannot analyze your resume right now. Please try again later."


class AssistantService:
    """Service for assistant model interactions"""

    def __init__(self, client: Optional[OpenAI] = None):
        if client is None:
            try:
                client = OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)
            except Exception as e:
                # Missing key: every call degrades to its fallback text
                logger.warning(f"Assistant client unavailable: {e}")
        self.client = client
        self.model = settings.OPENAI_MODEL
        self.temperature = settings.ASSISTANT_TEMPERATURE
        self.top_p = settings.ASSISTANT_TOP_P
        self.top_k = settings.ASSISTANT_TOP_K
        self.max_tokens = settings.ASSISTANT_MAX_TOKENS

    async def chat(self, message: str, role: UserRole = UserRole.JOBSEEKER) -> str:
        """Answer a career question with advice pitched at the user's role"""
        role_context = EMPLOYER_CONTEXT if UserRole(role) == UserRole.EMPLOYER else JOBSEEKER_CONTEXT
        prompt = (
            f'User Question: "{message}"\n\n'
            "Please provide a helpful, specific, and actionable response. Include practical tips where "
            "appropriate. Keep your response conversational but professional, and aim for 2-4 paragraphs."
        )
        return await self._generate(role_context, prompt, CHAT_FALLBACK)

    async def generate_job_description(self, job_title: str, company: str) -> str:
        prompt = f"""Create a comprehensive, professional job description for the position: "{job_title}" at "{company}".

Please include:
1. Company overview (2-3 sentences)
2. Job summary (3-4 sentences)
3. Key responsibilities (5-7 bullet points)
4. Required qualifications (education, experience, skills)
5. Preferred qualifications
6. Benefits overview

Make it engaging, specific, and professional. Use industry-standard language and formatting."""
        return await self._generate(None, prompt, JOB_DESCRIPTION_FALLBACK)

    async def generate_job_recommendations(self, user_profile: str, skills: List[str]) -> str:
        prompt = f"""As a professional career advisor, analyze this user profile and skills to provide specific, actionable job recommendations.

User Profile: "{user_profile}"
Skills: {', '.join(skills)}

Please provide:
1. 3-5 specific job titles that match their skills
2. Brief explanation (2-3 sentences) for each recommendation
3. Practical next steps they can take

Format your response in a clear, professional manner with bullet points and actionable advice."""
        return await self._generate(None, prompt, RECOMMENDATIONS_FALLBACK)

    async def generate_interview_questions(self, job_title: str, experience: str) -> str:
        prompt = f"""Generate 8-10 relevant interview questions for a "{job_title}" position with {experience} experience level.

Include:
1. 2-3 behavioral questions (STAR method)
2. 3-4 technical/role-specific questions
3. 2-3 situational questions
4. 1-2 questions about career goals

Format each question clearly and provide brief notes on what to look for in answers."""
        return await self._generate(None, prompt, INTERVIEW_QUESTIONS_FALLBACK)

    async def optimize_resume(self, resume_content: str, target_job: str) -> str:
        prompt = f"""As a professional resume coach, analyze this resume content and provide specific optimization suggestions for a "{target_job}" position:

Resume Content: "{resume_content}"

Please provide:
1. 3-5 specific improvements for content
2. Keyword suggestions for the target role
3. Formatting and structure recommendations
4. Action items to strengthen the application

Focus on making the resume more competitive and ATS-friendly."""
        return await self._generate(None, prompt, RESUME_FALLBACK)

    async def _generate(self, system_prompt: Optional[str], prompt: str, fallback: str) -> str:
        """Model text, or the fixed fallback on any failure or empty reply"""
        response = await self._get_chat_completion(system_prompt, prompt)
        return response if response and response.strip() else fallback

    async def _get_chat_completion(self, system_prompt: Optional[str], user_message: str) -> Optional[str]:
        """
        Get chat completion from the assistant API

        Args:
            system_prompt: Optional system prompt to guide the model
            user_message: The prompt to respond to
        """
        try:
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": user_message})

            params: Dict[str, Any] = {
                "model": self.model,
                "messages": messages,
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
                "top_p": self.top_p,
            }
            if self.top_k is not None:
                params["extra_body"] = {"top_k": self.top_k}

            response: ChatCompletion = self.client.chat.completions.create(**params)

            return response.choices[0].message.content

        except Exception as e:
            logger.error(f"Assistant API error: {str(e)}")
            return None
