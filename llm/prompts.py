RESUME_FIT_PROMPT = """
You are a career expert. Analyze the resume below against the job description and provide a fit score, feedback, and suggestions.

Resume:
{resume}

Job Description:
{job_description}

Rules:
- fit_score is an integer between 0 and 100, where 100 means the resume is a perfect fit for the job.
- feedback is detailed feedback on the resume and its alignment with the job description.
- suggestions are specific improvements to better align the resume with the job requirements, written as a numbered list ("1. ...", "2. ...").
Return JSON with fields:
{{
  "fit_score": integer,
  "feedback": string,
  "suggestions": string
}}
Return ONLY JSON.
"""


IMPROVEMENT_SUGGESTIONS_PROMPT = """
You are a resume reviewer. Suggest concrete improvements to the resume so it better matches the job description.

Resume:
{resume}

Job Description:
{job_description}

Rules:
- Each improvement is one short, actionable sentence.
- Only suggest changes the candidate could truthfully make; do not invent experience.
- Return an empty list if the resume needs no changes.
Return JSON with fields:
{{
  "improvements": [string]
}}
Return ONLY JSON.
"""


INTERVIEW_SCRIPT_PROMPT = """
You are an interview script generator. Write mock interview questions based on the job description and the candidate's resume skills.

Job Description:
{job_description}

Resume Skills:
{resume_skills}

Rules:
- Cover technical skills, behavioral competencies, and cultural fit.
- When no skills are provided, base the questions on the job description only.
- Each question is a single string, in the order it should be asked.
Return JSON with fields:
{{
  "questions": [string]
}}
Return ONLY JSON.
"""


TAILORED_RESUME_PROMPT = """
You are an expert resume writer and career coach. Generate a new resume based on the original resume's content and structure, optimized for the job description below. Incorporate the key skills effectively.

Original Resume:
{original_resume}

Job Description:
{job_description}

Key Skills to Emphasize:
{key_skills}

Rules:
- Keep it professional, concise, and impactful.
- Align the candidate's experience and skills with the job requirements without fabricating facts.
- Keep a similar tone and style to the original where appropriate, but prioritize clarity for the target role.
Return JSON with fields:
{{
  "tailored_resume_text": string
}}
Return ONLY JSON.
"""


RESPONSE_CRITIQUE_PROMPT = """
You are an expert interview coach. Analyze the user's transcribed response to an interview question.

Interview Question:
"{interview_question}"

User's Transcribed Response:
"{transcribed_response}"

Cover:
1. Communication style: clarity, conciseness, tone, and professionalism.
2. Confidence level: perceived confidence based on the language used.
3. Content relevance: how directly and thoroughly the response addresses the question.
4. Overall feedback: constructive feedback with specific, actionable suggestions.
Return JSON with fields:
{{
  "communication_style": string,
  "confidence_level": string,
  "content_relevance": string,
  "overall_feedback": string
}}
Return ONLY JSON.
"""


PROMPTS = {
    "analyze_resume_fit": RESUME_FIT_PROMPT,
    "suggest_resume_improvements": IMPROVEMENT_SUGGESTIONS_PROMPT,
    "generate_interview_script": INTERVIEW_SCRIPT_PROMPT,
    "generate_tailored_resume": TAILORED_RESUME_PROMPT,
    "analyze_user_response": RESPONSE_CRITIQUE_PROMPT,
}
