# exams/services.py
import logging

from rest_framework import serializers

from .models import Question

logger = logging.getLogger(__name__)


def answer_key_errors(question):
    """Problems that keep a question's answer key from being gradeable."""
    errors = []
    options = list(question.options.all())
    correct = [o for o in options if o.is_correct]

    if question.question_type == Question.QuestionType.ESSAY:
        if options:
            errors.append("Essay questions cannot have options.")
        return errors

    if len(options) < 2:
        errors.append("Choice questions need at least two options.")
    if not correct:
        errors.append("Choice questions need at least one correct option.")
    elif question.question_type == Question.QuestionType.SINGLE_CHOICE and len(correct) > 1:
        errors.append("Single choice questions must have exactly one correct option.")
    return errors


def ensure_gradeable(question):
    """Raises if a question on a published exam has an unusable answer key."""
    question = Question.objects.prefetch_related('options').get(pk=question.pk)
    errors = answer_key_errors(question)
    if errors:
        raise serializers.ValidationError({"options": errors})
    return question


def publish_exam(exam):
    questions = list(exam.questions.prefetch_related('options'))
    problems = {}
    for question in questions:
        errors = answer_key_errors(question)
        if errors:
            problems[f"question_{question.id}"] = errors
    if problems:
        raise serializers.ValidationError(problems)

    exam.is_published = True
    exam.save(update_fields=['is_published'])
    logger.info("Exam %s published with %d questions", exam.id, len(questions))
    return exam


def unpublish_exam(exam):
    exam.is_published = False
    exam.save(update_fields=['is_published'])
    logger.info("Exam %s unpublished", exam.id)
    return exam
