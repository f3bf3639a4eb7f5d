import base64
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

import gradio as gr
from dotenv import load_dotenv
from pydantic import ValidationError

from document_parser.parser import SUPPORTED_SUFFIXES, parse_document
from llm.client import build_client
from llm.invoker import PromptInvoker
from llm.pipeline import CareerFitPipeline
from render.report import render_analysis, render_critique, render_error
from schemas.analysis import AnalysisForm, ClassifiedError, OperationFailure, split_skills
from speech.providers import SILENT_WAV_DATA_URI, build_speech_provider

load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("careerfit_ai")

APP_TITLE = "CareerFit AI"
LOCAL_KEY_PATH = Path.home() / ".careerfit_ai_key"
OPENAI_MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]
HF_MODELS = [
    "HuggingFaceH4/zephyr-7b-beta",
    "mistralai/Mistral-7B-Instruct-v0.3",
]
HF_PROVIDER_LABEL = "Hugging Face (Inference API)"

DEFAULT_PROVIDER = os.getenv("CAREERFIT_PROVIDER", "openai")
DEFAULT_MODEL = os.getenv("CAREERFIT_MODEL", "")
SPEECH_PROVIDER = os.getenv("CAREERFIT_SPEECH_PROVIDER", "null")
STT_DELAY = float(os.getenv("CAREERFIT_STT_DELAY", "0.5"))


def _provider_defaults(provider: str) -> Tuple[list[str], str, str]:
    if provider == HF_PROVIDER_LABEL:
        return HF_MODELS, HF_MODELS[0], "Hugging Face Token"
    return OPENAI_MODELS, OPENAI_MODELS[0], "OpenAI API Key"


def _env_api_key(provider: str) -> str:
    if provider == HF_PROVIDER_LABEL:
        return os.getenv("HF_TOKEN", "")
    return os.getenv("OPENAI_API_KEY", "")


def load_api_key() -> Optional[str]:
    try:
        import keyring  # type: ignore

        return keyring.get_password(APP_TITLE, "api_key")
    except Exception as exc:
        logger.info("keyring unavailable (%s); falling back to %s", exc, LOCAL_KEY_PATH)
        if LOCAL_KEY_PATH.exists():
            return LOCAL_KEY_PATH.read_text().strip() or None
    return None


def save_api_key(key: str) -> None:
    try:
        import keyring  # type: ignore

        keyring.set_password(APP_TITLE, "api_key", key)
    except Exception as exc:
        logger.info("keyring unavailable (%s); writing %s", exc, LOCAL_KEY_PATH)
        LOCAL_KEY_PATH.write_text(key)


def clear_api_key() -> str:
    try:
        import keyring  # type: ignore

        keyring.delete_password(APP_TITLE, "api_key")
    except Exception as exc:
        logger.info("Nothing removed from keyring: %s", exc)
    if LOCAL_KEY_PATH.exists():
        LOCAL_KEY_PATH.unlink()
    return ""


def build_pipeline(provider: str, api_key: str, model: str) -> CareerFitPipeline:
    client = build_client(provider, api_key, model)
    speech = build_speech_provider(SPEECH_PROVIDER, transcription_delay=STT_DELAY)
    return CareerFitPipeline(PromptInvoker(client), speech=speech)


def _validation_messages(exc: ValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = str(err.get("msg", ""))
        messages.append(msg.replace("Value error, ", "", 1))
    return "\n".join(messages)


def load_uploaded_text(file_path: Optional[str]):
    """Return (text, status) for an uploaded .txt/.pdf."""
    if not file_path:
        return gr.update(), ""
    try:
        result = parse_document(file_path)
    except ValueError as exc:
        return "", str(exc)
    except Exception as exc:
        logger.error("Error processing file %s: %s", file_path, exc)
        return "", "Error processing file. Please try again or paste the content manually."
    return result.text, f"Extracted text using {result.method}"


def _audio_file_from_data_uri(data_uri: str) -> str:
    header, _, encoded = data_uri.partition(",")
    media_type = header[len("data:") :].split(";")[0]
    suffix = "." + media_type.split("/")[-1] if "/" in media_type else ".wav"
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(base64.b64decode(encoded))
        return tmp.name


async def run_analysis(
    resume_text: str,
    job_description_text: str,
    resume_skills: str,
    api_key: str,
    provider: str,
    model: str,
    save_key: bool,
):
    """Returns (status, results markdown, form state, questions state, question index)."""
    cleared = ("", None, [], 0)
    try:
        form = AnalysisForm(
            resume_text=resume_text or "",
            job_description_text=job_description_text or "",
            resume_skills=resume_skills or "",
        )
    except ValidationError as exc:
        return (_validation_messages(exc), *cleared)

    api_key = api_key or _env_api_key(provider)
    if not api_key:
        return ("API key/token required.", *cleared)
    if save_key:
        save_api_key(api_key)

    try:
        pipeline = build_pipeline(provider, api_key, model)
    except (ValueError, RuntimeError) as exc:
        return (str(exc), *cleared)

    outcome = await pipeline.perform_full_analysis(form.to_request())
    if isinstance(outcome, ClassifiedError):
        # Stale results are cleared on error.
        return (render_error(outcome), *cleared)

    logger.info(
        "Analysis complete (fit score %s, %d questions)",
        outcome.fit_analysis.fit_score,
        len(outcome.interview_script.questions),
    )
    form_state = {"form": form.dict(), "provider": provider, "api_key": api_key, "model": model}
    return (
        "Analysis complete.",
        render_analysis(outcome),
        form_state,
        list(outcome.interview_script.questions),
        0,
    )


def _current_question(questions: List[str], index: int) -> str:
    if not questions:
        return "Run an analysis first to generate interview questions."
    if index >= len(questions):
        return "Interview complete. You have answered all questions."
    return f"**Question {index + 1} of {len(questions)}:** {questions[index]}"


def _pipeline_from_state(state: Optional[dict]) -> Optional[CareerFitPipeline]:
    if not state:
        return None
    return build_pipeline(state["provider"], state["api_key"], state["model"])


async def play_question(state: Optional[dict], questions: List[str], index: int):
    pipeline = _pipeline_from_state(state)
    if pipeline is None or not questions or index >= len(questions):
        return None, "No question to play."
    outcome = await pipeline.get_text_to_speech({"text": questions[index]})
    if isinstance(outcome, OperationFailure):
        return None, outcome.error
    return _audio_file_from_data_uri(outcome.audio_data_uri), ""


async def simulate_recording(state: Optional[dict]):
    pipeline = _pipeline_from_state(state)
    if pipeline is None:
        return gr.update(), "Run an analysis first."
    # No microphone capture yet: the fixed silent clip stands in for a recording.
    outcome = await pipeline.get_speech_to_text({"audio_data_uri": SILENT_WAV_DATA_URI})
    if isinstance(outcome, OperationFailure):
        return gr.update(), outcome.error
    return outcome.transcription, "Recording transcribed."


async def critique_answer(
    state: Optional[dict], questions: List[str], index: int, answer: str
):
    pipeline = _pipeline_from_state(state)
    if pipeline is None or not questions or index >= len(questions):
        return "", "No active question."
    if not (answer or "").strip():
        return "", "Please record or type an answer first."
    outcome = await pipeline.analyze_spoken_response(
        {"transcribed_response": answer, "interview_question": questions[index]}
    )
    if isinstance(outcome, OperationFailure):
        return "", outcome.error
    return render_critique(outcome, question=questions[index]), "Feedback on your response is available."


def next_question(questions: List[str], index: int):
    index = min(index + 1, len(questions))
    return index, _current_question(questions, index), "", "", None


async def tailor_resume(state: Optional[dict]):
    pipeline = _pipeline_from_state(state)
    if pipeline is None:
        return "", None, "Run an analysis first."
    form = state["form"]
    outcome = await pipeline.generate_tailored_resume(
        {
            "original_resume": form["resume_text"],
            "job_description": form["job_description_text"],
            "key_skills": split_skills(form["resume_skills"]),
        }
    )
    if isinstance(outcome, OperationFailure):
        return "", None, outcome.error
    with tempfile.NamedTemporaryFile(
        delete=False, suffix=".txt", prefix="tailored_resume_", mode="w", encoding="utf-8"
    ) as tmp:
        tmp.write(outcome.tailored_resume_text)
        download_path = tmp.name
    return outcome.tailored_resume_text, download_path, "Tailored resume generated."


def build_ui():
    stored_key = load_api_key() or ""
    initial_provider = HF_PROVIDER_LABEL if DEFAULT_PROVIDER.lower().startswith("hugging") else "OpenAI"
    models, default_model, key_label = _provider_defaults(initial_provider)
    file_types = list(SUPPORTED_SUFFIXES)

    with gr.Blocks(title=APP_TITLE) as demo:
        gr.Markdown(
            f"# {APP_TITLE}\nAnalyze how well your resume fits a job, get improvement "
            "suggestions, and practice with a mock interview."
        )
        form_state = gr.State(None)
        questions_state = gr.State([])
        index_state = gr.State(0)

        with gr.Tab("Analyze"):
            with gr.Row():
                with gr.Column():
                    resume = gr.Textbox(
                        label="Your Resume",
                        lines=12,
                        placeholder="Paste your full resume text here, or upload a .txt/.pdf file...",
                    )
                    resume_file = gr.File(label="Upload resume", file_types=file_types, type="filepath")
                    resume_status = gr.Markdown()
                with gr.Column():
                    jd = gr.Textbox(
                        label="Job Description",
                        lines=12,
                        placeholder="Paste the full job description text here, or upload a .txt/.pdf file...",
                    )
                    jd_file = gr.File(label="Upload job description", file_types=file_types, type="filepath")
                    jd_status = gr.Markdown()
            skills = gr.Textbox(
                label="Key Skills from Your Resume",
                lines=2,
                placeholder="Separated by commas (e.g., Project Management, JavaScript, Data Analysis)",
            )
            with gr.Accordion("Model settings", open=False):
                provider = gr.Dropdown(
                    label="Provider",
                    choices=["OpenAI", HF_PROVIDER_LABEL],
                    value=initial_provider,
                )
                api = gr.Textbox(label=key_label, type="password", value=stored_key)
                save_key = gr.Checkbox(label="Save key locally (keyring preferred)", value=bool(stored_key))
                model = gr.Dropdown(
                    label="Model name",
                    choices=models,
                    value=DEFAULT_MODEL or default_model,
                    allow_custom_value=True,
                )
                clear_btn = gr.Button("Clear stored key")
            analyze_btn = gr.Button("Analyze", variant="primary")
            status = gr.Markdown()
            results = gr.Markdown()

        with gr.Tab("Interactive Interview"):
            question_md = gr.Markdown(_current_question([], 0))
            with gr.Row():
                play_btn = gr.Button("Play question")
                record_btn = gr.Button("Record answer (simulated)")
            question_audio = gr.Audio(label="Question audio", type="filepath", interactive=False)
            answer = gr.Textbox(label="Your answer", lines=5)
            with gr.Row():
                critique_btn = gr.Button("Get feedback", variant="primary")
                next_btn = gr.Button("Next question")
            interview_status = gr.Markdown()
            critique_md = gr.Markdown()

        with gr.Tab("Tailored Resume"):
            tailor_btn = gr.Button("Generate tailored resume", variant="primary")
            tailor_status = gr.Markdown()
            tailored_text = gr.Textbox(label="Tailored resume", lines=20)
            tailored_download = gr.File(label="Download .txt")

        resume_file.change(fn=load_uploaded_text, inputs=resume_file, outputs=[resume, resume_status])
        jd_file.change(fn=load_uploaded_text, inputs=jd_file, outputs=[jd, jd_status])

        analyze_btn.click(
            fn=run_analysis,
            inputs=[resume, jd, skills, api, provider, model, save_key],
            outputs=[status, results, form_state, questions_state, index_state],
        ).then(
            fn=_current_question,
            inputs=[questions_state, index_state],
            outputs=question_md,
        )

        play_btn.click(
            fn=play_question,
            inputs=[form_state, questions_state, index_state],
            outputs=[question_audio, interview_status],
        )
        record_btn.click(fn=simulate_recording, inputs=form_state, outputs=[answer, interview_status])
        critique_btn.click(
            fn=critique_answer,
            inputs=[form_state, questions_state, index_state, answer],
            outputs=[critique_md, interview_status],
        )
        next_btn.click(
            fn=next_question,
            inputs=[questions_state, index_state],
            outputs=[index_state, question_md, answer, critique_md, question_audio],
        )
        tailor_btn.click(
            fn=tailor_resume,
            inputs=form_state,
            outputs=[tailored_text, tailored_download, tailor_status],
        )

        def _update_provider_fields(selected: str):
            choices, value, label = _provider_defaults(selected)
            return (
                gr.update(choices=choices, value=value),
                gr.update(label=label),
            )

        provider.change(
            fn=_update_provider_fields,
            inputs=provider,
            outputs=[model, api],
        )

        clear_btn.click(fn=clear_api_key, inputs=None, outputs=api)

    return demo


if __name__ == "__main__":
    app = build_ui()
    app.launch(
        server_name="0.0.0.0",
        server_port=int(os.getenv("PORT", "7860")),
    )
