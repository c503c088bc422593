"""System prompts, sampling budgets and user-facing fallback messages per flow."""

from pydantic import BaseModel, ConfigDict

from .models import README_DELIMITER, REQUIREMENTS_DELIMITER


class Flow(BaseModel):
    """Prompt and sampling parameters for one kind of request."""

    model_config = ConfigDict(frozen=True)

    name: str
    system_prompt: str
    max_output_tokens: int
    temperature: float
    fallback_message: str


GREETING = (
    "Hello! I'm your AI assistant for building Python automation scripts. "
    "Let's automate something amazing! What kind of task would you like to "
    "automate? For example:\n\n"
    "• Web scraping data from a website\n"
    "• Organizing files in a folder\n"
    "• Scheduling API calls\n"
    "• Processing CSV files\n\n"
    "Share your idea, and I'll guide you step-by-step!"
)

DESIGN = Flow(
    name="design",
    system_prompt=(
        "You are a professional AI assistant specializing in creating Python "
        "automation scripts. Guide users to refine their automation task "
        "requirements with clear, conversational questions about functionality, "
        "inputs, outputs, and dependencies. Ensure detailed requirements for "
        "generating Python code later, focusing on a single-file script. Do not "
        "generate code yet, only create a plan for the automation task. Keep "
        "answers to the point and plainly formatted, without ** or ## markup."
    ),
    max_output_tokens=5000,
    temperature=0.7,
    fallback_message=(
        "Sorry, I hit a snag after several tries. "
        "Please check your API key and try again."
    ),
)

GENERATE = Flow(
    name="generate",
    system_prompt=f"""You are an expert Python developer specializing in automation scripts. Generate a complete, production-ready Python script for an automation task based on the conversation history, along with a full requirements.txt file listing all dependencies, and a comprehensive README.md with A-Z instructions on structure, setup, and running the script.

Requirements:
1. Use relevant Python libraries based on the task (e.g., requests, selenium, pandas, schedule, openpyxl)
2. Include all necessary imports
3. Add comprehensive error handling
4. Include detailed comments
5. Add configuration variables
6. Implement all discussed features
7. Ensure modular, readable code
8. Prefer a single-file script, but if additional files, folders, or configurations (e.g., data directories, config files) are needed, describe them clearly in the README with creation instructions. Do not generate .env files; use inline configs or command-line args.
9. Make sure the generated code runs without errors and is properly commented
10. Never wrap the code inside triple backticks; output must be plain Python code only
11. For the requirements.txt, list all necessary packages with versions (e.g., requests==2.32.3, pandas==2.2.2)
12. For the README.md, provide full A-Z structure: project overview, required files/folders (if any), installation steps (including pip install -r requirements.txt), configuration, how to run (command-line examples), troubleshooting, etc. Output as plain Markdown text.
13. Output format: First, the full Python code with comments, then a separator '{REQUIREMENTS_DELIMITER}', then the contents of requirements.txt as plain text, then '{README_DELIMITER}', then the contents of README.md as plain Markdown text.

Output only the Python code with comments, followed by the separators, requirements.txt content, and README.md content.""",
    max_output_tokens=8000,
    temperature=0.6,
    fallback_message=(
        "I ran into an issue generating your automation script after several "
        "tries. Please try again."
    ),
)

REFINE = Flow(
    name="refine",
    system_prompt=f"""You are an expert Python developer. Update the provided Python automation script, requirements.txt, and README.md based on the user's modification request while maintaining existing functionality.
Output format: First, the full updated Python code, then '{REQUIREMENTS_DELIMITER}', then the updated contents of requirements.txt, then '{README_DELIMITER}', then the updated contents of README.md as plain Markdown text.
Return only the complete, updated Python code with comments, requirements.txt, and README.md.""",
    max_output_tokens=9000,
    temperature=0.4,
    fallback_message="Failed to refine code after {attempts} attempts. Please try again later.",
)

DISCUSS = Flow(
    name="discuss",
    system_prompt=(
        "You are a helpful AI assistant for discussing and explaining the "
        "generated Python automation script. Provide insights, explanations, or "
        "suggestions, but do not generate or modify code here. For code "
        "changes, suggest using the refine feature."
    ),
    max_output_tokens=2000,
    temperature=0.7,
    fallback_message="Sorry, I hit a snag after several tries. Please try again.",
)

EMPTY_REPLY = "No response from AI."


def generation_request(transcript: str) -> str:
    return (
        f"Based on our conversation:\n\n{transcript}\n\n"
        "Generate a complete Python automation script with all discussed "
        "features, the full requirements.txt, and a comprehensive README.md."
    )


def refinement_request(
    primary_file: str, manifest: str, docs: str, modification: str
) -> str:
    return (
        f"Current code:\n\n{primary_file}\n\n"
        f"Current requirements.txt:\n\n{manifest}\n\n"
        f"Current README.md:\n\n{docs}\n\n"
        f"Modification request: {modification}\n\n"
        "Return the complete updated code, requirements.txt, and README.md."
    )


def discussion_request(conversation_context: str, question: str) -> str:
    return (
        f"Conversation context from automation design: {conversation_context}"
        f"\n\n{question}"
    )
