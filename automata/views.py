import json
import logging

from django.conf import settings
from django.http import JsonResponse, StreamingHttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .automaton import AutomatonKind
from .exceptions import ValidationError, WrongSimulatorError
from .fsa_properties import check_all_properties
from .fsa_simulation import (
    simulate,
    simulate_dfa,
    simulate_nfa,
    simulate_many,
    iter_nfa_steps,
    nfa_result_from_trace,
    ordered_states,
    result_to_dict
)
from .serialization import automaton_from_dict
from .validation import validate, ensure_valid

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_LENGTH = 10000
DEFAULT_MAX_BATCH_SIZE = 100


def _parse_automaton(request):
    """Parse the JSON body and deserialize its 'automaton' record."""
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object')

    record = data.get('automaton')
    if not record:
        raise ValueError('Missing automaton definition')

    return automaton_from_dict(record), data


def _read_input(value):
    """Accept a string (one symbol per character) or a list of symbol strings."""
    if value is None:
        value = ''

    if isinstance(value, list):
        if not all(isinstance(symbol, str) for symbol in value):
            raise ValueError('input symbols must be strings')
    elif not isinstance(value, str):
        raise ValueError('input must be a string or a list of symbols')

    max_length = getattr(settings, 'AUTOMATA_MAX_INPUT_LENGTH', DEFAULT_MAX_INPUT_LENGTH)
    if len(value) > max_length:
        raise ValueError(f'input is longer than {max_length} symbols')

    return value


def _error_response(error, status):
    logger.warning("Rejected simulation request: %s", error)
    return JsonResponse({'error': str(error)}, status=status)


def _sse(payload):
    return f"data: {json.dumps(payload)}\n\n"


def _stream_error(message, status):
    def error_generator():
        yield _sse({'error': message})

    return StreamingHttpResponse(error_generator(), content_type='text/event-stream', status=status)


@csrf_exempt
@require_POST
def validate_automaton(request):
    """
    Django view to check the structural invariants of an automaton.

    Expects a POST request with a JSON body containing:
    - automaton: The automaton record

    Returns {'valid': True} or the first violation with its kind and the
    offending state / transition.
    """
    try:
        automaton, _ = _parse_automaton(request)
        return JsonResponse(validate(automaton).to_dict())

    except ValueError as e:
        return _error_response(e, 400)
    except Exception as e:
        logger.exception("Validation request failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


def _simulation_view(request, simulator):
    try:
        automaton, data = _parse_automaton(request)
        input_symbols = _read_input(data.get('input'))

        result = simulator(automaton, input_symbols)
        return JsonResponse(result_to_dict(automaton, result))

    except ValidationError as e:
        logger.warning("Rejected invalid automaton: %s", e)
        return JsonResponse(e.to_dict(), status=400)
    except (ValueError, WrongSimulatorError) as e:
        return _error_response(e, 400)
    except Exception as e:
        logger.exception("Simulation request failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate_automaton(request):
    """
    Django view to handle simulation requests.
    Picks the DFA or NFA simulator from the automaton's kind.

    Expects a POST request with a JSON body containing:
    - automaton: The automaton record
    - input: The input string (or list of symbols) to simulate

    Returns a JSON response with simulation results.
    """
    return _simulation_view(request, simulate)


@csrf_exempt
@require_POST
def simulate_dfa_view(request):
    """
    Django view to handle deterministic simulation requests specifically.
    """
    return _simulation_view(request, simulate_dfa)


@csrf_exempt
@require_POST
def simulate_nfa_view(request):
    """
    Django view to handle nondeterministic simulation requests.
    """
    return _simulation_view(request, simulate_nfa)


@csrf_exempt
@require_POST
def simulate_nfa_stream(request):
    """
    Django view to handle streaming nondeterministic simulation requests.
    Sends each state set as it is computed using Server-Sent Events format,
    then a summary and an end-of-stream marker.
    """
    try:
        automaton, data = _parse_automaton(request)
        input_symbols = _read_input(data.get('input'))
        if automaton.kind is not AutomatonKind.NONDETERMINISTIC:
            raise WrongSimulatorError(AutomatonKind.NONDETERMINISTIC, automaton.kind)
        ensure_valid(automaton)
        steps = iter_nfa_steps(automaton, input_symbols)

    except ValidationError as e:
        logger.warning("Rejected invalid automaton: %s", e)
        return _stream_error(str(e), 400)
    except (ValueError, WrongSimulatorError) as e:
        logger.warning("Rejected streaming request: %s", e)
        return _stream_error(str(e), 400)
    except Exception as e:
        logger.exception("Streaming request failed")
        return _stream_error(f'Server error: {str(e)}', 500)

    def result_generator():
        """Generator to stream NFA steps as Server-Sent Events"""
        trace = []
        try:
            for step, states in steps:
                trace.append((step, states))
                yield _sse({'type': 'step', 'step': step, 'states': ordered_states(automaton, states)})

            summary = result_to_dict(automaton, nfa_result_from_trace(automaton, trace))
            summary['type'] = 'summary'
            yield _sse(summary)

            # Send end-of-stream marker
            yield _sse({'type': 'end'})

        except Exception as e:
            logger.exception("Streaming simulation failed")
            yield _sse({'type': 'error', 'message': str(e)})

    response = StreamingHttpResponse(result_generator(), content_type='text/event-stream')

    response['Cache-Control'] = 'no-cache'
    response['X-Accel-Buffering'] = 'no'  # Disable nginx buffering

    return response


@csrf_exempt
@require_POST
def simulate_batch(request):
    """
    Django view to run several test strings against one automaton.

    Expects a POST request with a JSON body containing:
    - automaton: The automaton record
    - inputs: List of input strings (or symbol lists)

    Returns {'results': [...]} with one entry per input, in order.
    """
    try:
        automaton, data = _parse_automaton(request)

        inputs = data.get('inputs')
        if not isinstance(inputs, list):
            raise ValueError('inputs must be a list')

        max_batch = getattr(settings, 'AUTOMATA_MAX_BATCH_SIZE', DEFAULT_MAX_BATCH_SIZE)
        if len(inputs) > max_batch:
            raise ValueError(f'at most {max_batch} inputs can be simulated at once')

        inputs = [_read_input(value) for value in inputs]
        results = simulate_many(automaton, inputs)

        return JsonResponse({
            'type': automaton.kind.value,
            'results': [
                dict(result_to_dict(automaton, result), input=value)
                for value, result in zip(inputs, results)
            ],
            'num_accepted': sum(result.accepted for result in results)
        })

    except ValidationError as e:
        logger.warning("Rejected invalid automaton: %s", e)
        return JsonResponse(e.to_dict(), status=400)
    except ValueError as e:
        return _error_response(e, 400)
    except Exception as e:
        logger.exception("Batch simulation request failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def check_properties(request):
    """
    Django view to check whether an automaton is deterministic, complete and
    connected.
    """
    try:
        automaton, _ = _parse_automaton(request)
        return JsonResponse(check_all_properties(automaton))

    except ValueError as e:
        return _error_response(e, 400)
    except Exception as e:
        logger.exception("Property check request failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
