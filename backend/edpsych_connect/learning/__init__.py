from .styles import LearningStyle, assess_learning_style, get_learning_style_questions
