# codeleap/fallback_bank.py

"""
Curated, offline challenges used when the AI path fails.

The catalog is declared once and never changes while the process runs.
Selection is a pure function of (language, difficulty, seed): the bank draws no
randomness of its own, callers supply the seed.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .schemas import Difficulty, Language, language_label, normalize_difficulty, normalize_language


@dataclass(frozen=True)
class FallbackEntry:
    code: str
    correct: bool
    explanation: str
    problem: Optional[str] = None
    code_explanation: Optional[str] = None
    additional_info: Optional[str] = None


Catalog = Mapping[Language, Mapping[Difficulty, Sequence[FallbackEntry]]]

DEFAULT_LANGUAGE = Language.JAVASCRIPT
DEFAULT_DIFFICULTY = Difficulty.EASY

# ====== JAVASCRIPT ======
_JAVASCRIPT: Dict[Difficulty, Tuple[FallbackEntry, ...]] = {
    Difficulty.EASY: (
        FallbackEntry(
            code="let count = 0;\nfor (let i = 1; i <= 5; i++) {\n  count += i;\n}\nconsole.log(count);",
            correct=True,
            explanation="This correctly calculates the sum of numbers 1 through 5 using a for loop.",
        ),
        FallbackEntry(
            code="function multiply(a, b) {\n  return a * b\n}\n\nconst result = multiply(4, 5);\nconsole.log(result);",
            correct=False,
            explanation="Missing semicolon after the return statement. Should be: return a * b;",
        ),
        FallbackEntry(
            problem="This function should calculate the sum of two numbers. Does it work correctly?",
            code="function addNumbers(a, b) {\n  return a + b;\n}\n\nconsole.log(addNumbers(5, 3)); // Should output 8",
            code_explanation="This function takes two parameters and returns their sum using the + operator.",
            correct=True,
            explanation=(
                "This code is correct! The function properly adds two numbers and returns the result. "
                "The + operator works correctly for numeric addition."
            ),
            additional_info=(
                "This is a basic example of a pure function - it takes inputs and returns an output "
                "without side effects."
            ),
        ),
    ),
    Difficulty.MEDIUM: (
        FallbackEntry(
            code=(
                'const users = [{name: "Alice", age: 25}, {name: "Bob", age: 30}];\n'
                "const names = users.map(user => user.name);\nconsole.log(names);"
            ),
            correct=True,
            explanation="This correctly uses the map method to extract names from an array of objects.",
        ),
        FallbackEntry(
            code=(
                "async function getData() {\n  const response = await fetch(\"/api/data\");\n"
                "  const data = response.json();\n  return data;\n}"
            ),
            correct=False,
            explanation="Missing await before response.json(). Should be: const data = await response.json();",
        ),
        FallbackEntry(
            problem="This function should reverse a string. Is there an issue with the implementation?",
            code=(
                "function reverseString(str) {\n  let reversed = '';\n"
                "  for (let i = str.length; i >= 0; i--) {\n    reversed += str[i];\n  }\n"
                "  return reversed;\n}\n\nconsole.log(reverseString('hello')); // Should output 'olleh'"
            ),
            code_explanation="This function attempts to reverse a string by iterating backwards through its characters.",
            correct=False,
            explanation=(
                "This code has a bug! The loop starts at str.length instead of str.length - 1, so the first "
                "iteration reads str[str.length], which is undefined, and \"undefined\" ends up at the start "
                "of the reversed string."
            ),
            additional_info=(
                "The correct loop is: for (let i = str.length - 1; i >= 0; i--). String indices are 0-based, "
                "so the last character is at index length - 1."
            ),
        ),
    ),
    Difficulty.HARD: (
        FallbackEntry(
            code=(
                "function memoize(fn) {\n  const cache = new Map();\n  return function(...args) {\n"
                "    const key = JSON.stringify(args);\n    if (cache.has(key)) {\n      return cache.get(key);\n"
                "    }\n    const result = fn.apply(this, args);\n    cache.set(key, result);\n"
                "    return result;\n  };\n}"
            ),
            correct=True,
            explanation="This correctly implements a memoization function using closures and a Map for caching.",
        ),
        FallbackEntry(
            problem="This function implements a binary search algorithm. Does it handle all edge cases correctly?",
            code=(
                "function binarySearch(arr, target) {\n  let left = 0;\n  let right = arr.length - 1;\n\n"
                "  while (left <= right) {\n    let mid = Math.floor((left + right) / 2);\n\n"
                "    if (arr[mid] === target) {\n      return mid;\n    } else if (arr[mid] < target) {\n"
                "      left = mid + 1;\n    } else {\n      right = mid - 1;\n    }\n  }\n\n  return -1;\n}"
            ),
            code_explanation="This function implements binary search to find a target value in a sorted array.",
            correct=True,
            explanation=(
                "This binary search implementation is correct! It handles empty arrays, single elements, "
                "a missing target, and targets at the beginning or end of the array."
            ),
            additional_info=(
                "Binary search has O(log n) time complexity and requires the input array to be sorted. "
                "The algorithm repeatedly divides the search space in half."
            ),
        ),
    ),
}

# ====== HTML ======
_HTML: Dict[Difficulty, Tuple[FallbackEntry, ...]] = {
    Difficulty.EASY: (
        FallbackEntry(
            code=(
                '<div class="card">\n  <h2>Welcome</h2>\n  <p>This is a simple card component.</p>\n'
                "  <button>Click me</button>\n</div>"
            ),
            correct=True,
            explanation="This HTML is properly structured with correct nesting and semantic elements.",
        ),
        FallbackEntry(
            code="<ul>\n  <li>Item 1</li>\n  <li>Item 2\n  <li>Item 3</li>\n</ul>",
            correct=False,
            explanation='Missing closing </li> tag for "Item 2". Each list item must be properly closed.',
        ),
        FallbackEntry(
            problem="This HTML creates a simple form. Is the structure valid?",
            code=(
                '<form>\n  <label for="username">Username:</label>\n'
                '  <input type="text" id="username" name="username" required>\n\n'
                '  <label for="email">Email:</label>\n  <input type="email" id="email" name="email" required>\n\n'
                '  <button type="submit">Submit</button>\n</form>'
            ),
            code_explanation="This HTML creates a form with two input fields and a submit button.",
            correct=True,
            explanation=(
                'This HTML is correct! The form has proper labels associated with inputs using the "for" '
                "attribute, appropriate input types, and a submit button."
            ),
            additional_info=(
                'Good practices shown: semantic HTML, proper label association, input validation with "required", '
                "and appropriate input types."
            ),
        ),
    ),
    Difficulty.MEDIUM: (
        FallbackEntry(
            code=(
                '<form>\n  <label for="username">Username:</label>\n'
                '  <input type="text" id="username" name="username" required>\n'
                '  <label for="password">Password:</label>\n'
                '  <input type="password" id="password" name="password" required>\n'
                '  <button type="submit">Login</button>\n</form>'
            ),
            correct=True,
            explanation="This form is properly structured with labels correctly associated with inputs for accessibility.",
        ),
        FallbackEntry(
            problem="This HTML table should display user data. Are there any accessibility issues?",
            code=(
                "<table>\n  <tr>\n    <td>Name</td>\n    <td>Age</td>\n    <td>Email</td>\n  </tr>\n"
                "  <tr>\n    <td>John Doe</td>\n    <td>30</td>\n    <td>john@example.com</td>\n  </tr>\n"
                "  <tr>\n    <td>Jane Smith</td>\n    <td>25</td>\n    <td>jane@example.com</td>\n  </tr>\n"
                "</table>"
            ),
            code_explanation="This HTML creates a table to display user information with headers and data rows.",
            correct=False,
            explanation=(
                "This HTML has accessibility issues! The first row should use <th> elements instead of <td> "
                "for headers, and the table should have <thead> and <tbody> sections for screen readers."
            ),
            additional_info=(
                "Correct structure: <thead><tr><th>Name</th><th>Age</th><th>Email</th></tr></thead>"
                "<tbody>...data rows...</tbody>"
            ),
        ),
    ),
    Difficulty.HARD: (
        FallbackEntry(
            code=(
                "<article>\n  <header>\n    <h1>Article Title</h1>\n"
                '    <time datetime="2024-01-15">January 15, 2024</time>\n  </header>\n'
                "  <section>\n    <p>Article content goes here.</p>\n  </section>\n</article>"
            ),
            correct=True,
            explanation="This uses semantic HTML5 elements correctly to structure an article with proper hierarchy.",
        ),
        FallbackEntry(
            problem="This HTML creates a complex form with validation. Are all accessibility requirements met?",
            code=(
                '<form aria-labelledby="contact-form">\n  <h2 id="contact-form">Contact Form</h2>\n\n'
                "  <fieldset>\n    <legend>Personal Information</legend>\n\n    <div>\n"
                '      <label for="name">Full Name *</label>\n'
                '      <input type="text" id="name" name="name" required aria-describedby="name-error">\n'
                '      <div id="name-error" role="alert" aria-live="polite"></div>\n    </div>\n\n    <div>\n'
                '      <label for="phone">Phone Number</label>\n'
                '      <input type="tel" id="phone" name="phone" aria-describedby="phone-help">\n'
                '      <div id="phone-help">Format: (123) 456-7890</div>\n    </div>\n  </fieldset>\n\n'
                '  <button type="submit">Send Message</button>\n</form>'
            ),
            code_explanation="This HTML creates an accessible contact form with proper ARIA attributes and semantic structure.",
            correct=True,
            explanation=(
                "This HTML is excellent! It uses ARIA labels, fieldset grouping, error message association, "
                "live regions for dynamic content, and semantic structure."
            ),
            additional_info=(
                'Key accessibility features: aria-labelledby, aria-describedby, role="alert", aria-live="polite", '
                "fieldset/legend grouping, and proper form labeling."
            ),
        ),
    ),
}

# ====== CSS ======
_CSS: Dict[Difficulty, Tuple[FallbackEntry, ...]] = {
    Difficulty.EASY: (
        FallbackEntry(
            code=(
                ".button {\n  background-color: #007bff;\n  color: white;\n  padding: 10px 20px;\n"
                "  border: none;\n  border-radius: 4px;\n  cursor: pointer;\n}"
            ),
            correct=True,
            explanation="This CSS correctly styles a button with proper syntax and semicolons.",
        ),
        FallbackEntry(
            code=(
                ".card {\n  background-color: #f8f9fa\n  padding: 20px;\n  border-radius: 8px;\n"
                "  box-shadow: 0 2px 4px rgba(0,0,0,0.1);\n}"
            ),
            correct=False,
            explanation="Missing semicolon after background-color property. Should be: background-color: #f8f9fa;",
        ),
        FallbackEntry(
            problem="This CSS should center a div horizontally and vertically. Will it work?",
            code=(
                ".container {\n  display: flex;\n  justify-content: center;\n  align-items: center;\n"
                "  height: 100vh;\n}\n\n.centered-box {\n  width: 200px;\n  height: 200px;\n"
                "  background-color: blue;\n}"
            ),
            code_explanation="This CSS uses flexbox to center a box both horizontally and vertically within its container.",
            correct=True,
            explanation=(
                "This CSS is correct! Flexbox with justify-content: center and align-items: center centers "
                "the child element both horizontally and vertically."
            ),
            additional_info=(
                "Flexbox is the modern standard for centering. The container takes full viewport height (100vh) "
                "and centers its content."
            ),
        ),
    ),
    Difficulty.MEDIUM: (
        FallbackEntry(
            code=(
                ".container {\n  display: flex;\n  justify-content: center;\n  align-items: center;\n"
                "  min-height: 100vh;\n  gap: 20px;\n}"
            ),
            correct=True,
            explanation="This correctly uses flexbox to center content both horizontally and vertically.",
        ),
        FallbackEntry(
            problem="This CSS creates a responsive grid layout. Is there an issue with the implementation?",
            code=(
                ".grid-container {\n  display: grid;\n  grid-template-columns: repeat(auto-fit, minmax(250px, 1fr));\n"
                "  gap: 20px;\n  padding: 20px;\n}\n\n.grid-item {\n  background-color: #f0f0f0;\n"
                "  padding: 20px;\n  border-radius: 8px;\n  min-height: 200px;\n}"
            ),
            code_explanation=(
                "This CSS creates a responsive grid that automatically adjusts the number of columns "
                "based on available space."
            ),
            correct=True,
            explanation=(
                "This CSS is correct! auto-fit with minmax() produces a responsive layout that adjusts columns "
                "to the available space while keeping a minimum width of 250px."
            ),
            additional_info=(
                "auto-fit collapses empty columns, while auto-fill would keep them. minmax(250px, 1fr) keeps "
                "items at least 250px wide but lets them grow to fill available space."
            ),
        ),
    ),
    Difficulty.HARD: (
        FallbackEntry(
            code=(
                "@keyframes fadeIn {\n  from { opacity: 0; transform: translateY(20px); }\n"
                "  to { opacity: 1; transform: translateY(0); }\n}\n\n.animate {\n"
                "  animation: fadeIn 0.3s ease-out;\n}"
            ),
            correct=True,
            explanation="This correctly defines a CSS animation with keyframes for a fade-in effect.",
        ),
        FallbackEntry(
            problem="This CSS implements a complex animation with transforms. Are there any performance issues?",
            code=(
                ".animated-element {\n  width: 100px;\n  height: 100px;\n  background-color: red;\n"
                "  animation: complexMove 3s ease-in-out infinite;\n}\n\n@keyframes complexMove {\n"
                "  0% {\n    transform: translateX(0) rotate(0deg);\n    left: 0px;\n  }\n"
                "  50% {\n    transform: translateX(200px) rotate(180deg);\n    left: 100px;\n  }\n"
                "  100% {\n    transform: translateX(0) rotate(360deg);\n    left: 0px;\n  }\n}"
            ),
            code_explanation=(
                "This CSS creates an animation that moves and rotates an element using both transforms "
                "and position properties."
            ),
            correct=False,
            explanation=(
                "This CSS has performance issues! Animating left alongside transform forces layout "
                "recalculation on every frame, while transforms alone are handled by the compositor."
            ),
            additional_info=(
                "Use only transform properties: translateX() for movement instead of left. Transforms are "
                "GPU-accelerated and don't trigger layout recalculations."
            ),
        ),
    ),
}

FALLBACK_BANK: Dict[Language, Dict[Difficulty, Tuple[FallbackEntry, ...]]] = {
    Language.JAVASCRIPT: _JAVASCRIPT,
    Language.HTML: _HTML,
    Language.CSS: _CSS,
}

# Per-language wording for texts an entry does not author itself.
_TEMPLATES: Dict[Language, Dict[str, str]] = {
    Language.JAVASCRIPT: {
        "code_explanation": "This JavaScript demonstrates {difficulty}-level programming concepts.",
        "additional_info": "Understanding these {difficulty} JavaScript concepts is important for development.",
    },
    Language.HTML: {
        "code_explanation": "This HTML demonstrates {difficulty}-level markup concepts.",
        "additional_info": "Proper HTML structure is essential for {difficulty} web development.",
    },
    Language.CSS: {
        "code_explanation": "This CSS demonstrates {difficulty}-level styling concepts.",
        "additional_info": "Mastering {difficulty} CSS concepts is important for modern web design.",
    },
}


def resolve_bucket(language, difficulty, catalog: Catalog = FALLBACK_BANK) -> Tuple[Language, Difficulty]:
    """
    Map possibly-unknown inputs onto a non-empty catalog bucket.

    Unknown difficulty, or an empty/missing bucket, falls back to the language's
    easy bucket; an unknown language falls back to javascript/easy.
    """
    try:
        lang = normalize_language(language)
    except ValueError:
        return DEFAULT_LANGUAGE, DEFAULT_DIFFICULTY
    if not catalog.get(lang):
        return DEFAULT_LANGUAGE, DEFAULT_DIFFICULTY

    try:
        diff = normalize_difficulty(difficulty)
    except ValueError:
        diff = DEFAULT_DIFFICULTY
    if not catalog[lang].get(diff):
        diff = DEFAULT_DIFFICULTY
    return lang, diff


def select_fallback(language, difficulty, seed: int, catalog: Catalog = FALLBACK_BANK) -> FallbackEntry:
    lang, diff = resolve_bucket(language, difficulty, catalog)
    entries = catalog[lang][diff]
    return entries[int(seed) % len(entries)]


def fallback_payload(entry: FallbackEntry, language: Language, difficulty: Difficulty) -> Dict[str, object]:
    """Render an entry into the raw payload shape the assembler accepts."""
    templates = _TEMPLATES[language]
    diff = difficulty.value
    return {
        "problem": entry.problem or f"Is this {language_label(language)} code correct?",
        "code": entry.code,
        "codeExplanation": entry.code_explanation or templates["code_explanation"].format(difficulty=diff),
        "isCorrect": entry.correct,
        "explanation": entry.explanation,
        "additionalInfo": entry.additional_info or templates["additional_info"].format(difficulty=diff),
    }
