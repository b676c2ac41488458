# apps/projects/forms.py
from django import forms

from .models import Project


class ProjectForm(forms.Form):
    """
    Tworzenie i edycja projektu. Przy edycji zapisujemy tylko pola,
    które faktycznie przyszły w żądaniu (częściowa aktualizacja).
    """
    name = forms.CharField(max_length=200, required=False)
    code = forms.CharField(max_length=50, required=False)
    parent_id = forms.IntegerField(required=False)
    weight = forms.FloatField(required=False, min_value=0, max_value=100)
    allocated_hours = forms.FloatField(required=False, min_value=0)
    additional_hours = forms.FloatField(required=False, min_value=0)
    milestone_date = forms.DateField(required=False, widget=forms.DateInput(attrs={'type': 'date'}))
    risk_level = forms.ChoiceField(choices=Project.RiskChoices.choices, required=False)
    overage_reason = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 3}))
    lead_id = forms.IntegerField(required=False)
    phase = forms.CharField(max_length=100, required=False)

    def submitted_fields(self) -> dict:
        """cleaned_data ograniczone do pól obecnych w POST."""
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if name in self.data
        }
