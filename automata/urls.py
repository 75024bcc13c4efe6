from django.urls import path
from . import views

urlpatterns = [
    # Structural checks
    path('api/validate/', views.validate_automaton, name='validate_automaton'),
    path('api/check-properties/', views.check_properties, name='check_properties'),

    # Pick the simulator from the automaton's kind
    path('api/simulate/', views.simulate_automaton, name='simulate'),

    # Specific simulators
    path('api/simulate-dfa/', views.simulate_dfa_view, name='simulate_dfa'),
    path('api/simulate-nfa/', views.simulate_nfa_view, name='simulate_nfa'),
    path('api/simulate-nfa-stream/', views.simulate_nfa_stream, name='simulate_nfa_stream'),

    # Several test strings against one automaton
    path('api/simulate-batch/', views.simulate_batch, name='simulate_batch'),
]
