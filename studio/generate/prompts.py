# Prompt templates, one builder per generation mode.
# Every builder is a pure function of its inputs: equal inputs give equal prompts.

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence, Union

from .types import ConversationTurn

Endpoint = Union[str, Mapping[str, str]]


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_chat_prompt(message: str, history: Sequence[ConversationTurn]) -> str:
    if not history:
        return f"User: {message}"
    lines = "\n".join(f"{turn.role}: {turn.content}" for turn in history)
    return f"Previous conversation:\n{lines}\n\nUser: {message}"


def build_code_prompt(language: str, description: str, requirements: Sequence[str]) -> str:
    return f"""
Generate {language} code for the following requirements:

Description: {description}

Requirements:
{_bullets(requirements)}

Please provide clean, well-commented code with proper error handling.
Include any necessary imports or dependencies.

Code:
"""


ANALYSIS_DIMENSIONS = (
    "Code quality assessment",
    "Potential improvements",
    "Security considerations",
    "Performance optimizations",
    "Best practices recommendations",
)


def build_analysis_prompt(code: str, language: str) -> str:
    dims = "\n".join(f"{i}. {d}" for i, d in enumerate(ANALYSIS_DIMENSIONS, start=1))
    return f"""
Analyze the following {language} code and provide:
{dims}

Code to analyze:
```{language}
{code}
```

Analysis:
"""


def build_firebase_function_prompt(function_name: str, description: str) -> str:
    return f"""
Create a Firebase Cloud Function with the following specifications:

Function Name: {function_name}
Description: {description}

Requirements:
- Use Firebase Functions v2 syntax
- Include proper error handling
- Add appropriate logging
- Include input validation
- Follow Firebase best practices
- Return appropriate HTTP responses

Generate the complete function code:
"""


def build_java_class_prompt(class_name: str, description: str, features: Sequence[str]) -> str:
    return f"""
Generate Advanced Java code for a class named "{class_name}":

Description: {description}

Features to implement:
{_bullets(features)}

Requirements:
- Use Java 21 features where appropriate
- Include proper JavaDoc comments
- Implement appropriate design patterns
- Add error handling and validation
- Include unit test examples
- Follow clean code principles

Generate the complete Java class:
"""


def build_java_app_prompt(app_name: str, description: str, features: Sequence[str], spring_boot: bool) -> str:
    return f"""
Generate a complete Java application:

Application: {app_name}
Description: {description}
Features: {", ".join(features)}
Use Spring Boot: {"true" if spring_boot else "false"}

Generate:
1. Project structure (Maven/Gradle)
2. Main application class
3. Configuration files
4. Entity classes
5. Repository interfaces
6. Service classes
7. Controller classes (if web app)
8. Test classes
9. Docker configuration
10. README with setup instructions

Include modern Java patterns, dependency injection, and best practices.
"""


def build_component_prompt(component_name: str, description: str, framework: str, props: Sequence[str]) -> str:
    return f"""
Create a {framework} component named "{component_name}":

Description: {description}
Props: {", ".join(props)}

Requirements:
- Use modern {framework} patterns
- Include TypeScript if applicable
- Add proper prop validation
- Include responsive design with Tailwind CSS
- Add error boundaries and loading states
- Follow accessibility best practices
- Include comprehensive JSDoc comments

Generate the complete component code:
"""


def _endpoint_line(ep: Endpoint) -> str:
    if isinstance(ep, str):
        return ep
    return f"{ep.get('method', 'GET')} {ep.get('path', '/')} - {ep.get('description', '')}".rstrip(" -")


def build_api_prompt(description: str, endpoints: Sequence[Endpoint], authentication: bool) -> str:
    lines = "\n".join(_endpoint_line(ep) for ep in endpoints)
    return f"""
Generate complete API endpoints for:

Description: {description}
Endpoints:
{lines}

Requirements:
- Include authentication: {"true" if authentication else "false"}
- Add input validation
- Implement proper error handling
- Add rate limiting
- Include CORS configuration
- Add comprehensive logging
- Follow REST best practices
- Include OpenAPI documentation

Generate complete API implementation:
"""


def build_database_schema_prompt(description: str, collections: Sequence[str]) -> str:
    return f"""
Design a Firebase Firestore database schema for:

Description: {description}
Collections: {", ".join(collections)}

Generate:
1. Complete Firestore data structure
2. Security rules
3. Indexes configuration
4. Data validation rules
5. Example queries
6. CRUD operations

Provide a comprehensive database design with proper relationships and security.
"""


PROJECT_PLAN_SHAPE = """{
  "analysis": "Project understanding and recommendations",
  "architecture": "System architecture overview",
  "fileStructure": {
    "directories": ["list of directories to create"],
    "files": [
      {
        "path": "relative/path/to/file",
        "type": "javascript|java|json|markdown|css|html",
        "content": "complete file content",
        "description": "purpose of this file"
      }
    ]
  },
  "dependencies": {
    "npm": ["list of npm packages"],
    "maven": ["list of maven dependencies"],
    "firebase": ["list of firebase services needed"]
  },
  "commands": {
    "setup": ["initialization commands"],
    "development": ["development commands"],
    "deployment": ["deployment commands"]
  },
  "features": ["list of implemented features"],
  "nextSteps": ["suggested next development steps"]
}"""


def build_project_plan_prompt(
    prompt: str,
    project_type: str,
    requirements: Sequence[str],
    build_context: Mapping[str, Any],
) -> str:
    context_json = json.dumps(dict(build_context), indent=2, sort_keys=True, default=str)
    return f"""
You are an expert software architect and project builder. Based on the user's prompt, generate a comprehensive project plan including:

1. PROJECT ANALYSIS
   - Understanding of requirements
   - Technology recommendations
   - Architecture decisions

2. FILE STRUCTURE
   - Complete directory structure
   - File organization
   - Naming conventions

3. CODE GENERATION
   - Component files with complete code
   - Configuration files
   - Package dependencies

4. IMPLEMENTATION STEPS
   - Step-by-step build process
   - Command sequences
   - Deployment instructions

5. FIREBASE INTEGRATION
   - Database schema
   - Cloud functions
   - Security rules
   - Authentication setup

6. JAVA INTEGRATION (if applicable)
   - Java class structure
   - Maven/Gradle configuration
   - Spring Boot setup (if needed)
   - Integration patterns

Project Type: {project_type}
Build Context: {context_json}
Additional Requirements: {", ".join(requirements)}

User Prompt: {prompt}

Generate a detailed project plan in JSON format with the following structure,
inside a single ```json fenced block:
{PROJECT_PLAN_SHAPE}

Ensure all code is production-ready, follows best practices, and includes proper error handling.
"""
